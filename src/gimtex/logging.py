from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False

_PROCESSORS = [
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]


def _redirect_to_file(filename: str | Path) -> None:
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(logging.FileHandler(str(filename), encoding="utf-8"))
    root.setLevel(logging.INFO)


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Route gimtex diagnostics away from the payload stream.

    The first call installs JSON rendering (ISO timestamp, level) and a
    stderr handler. A later call with `filename` moves every record to that
    file instead, which is how `--log-file` takes effect after import.

    Args:
        filename: log file to switch to; stderr is kept when None.

    Returns:
        The `gimtex` structlog logger.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if filename:
        _redirect_to_file(filename)
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(level=logging.INFO, handlers=[logging.StreamHandler(sys.stderr)], format="%(message)s")
        structlog.configure(
            processors=_PROCESSORS,
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("gimtex")


logger = setup_logging()
