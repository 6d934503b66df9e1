"""Scan pipeline: discover, filter, sort, then process in parallel and assemble."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gimtex.dependencies import inspect_dependencies
from gimtex.discovery import discover_files
from gimtex.filters import apply_glob_filter, compile_glob, to_entries
from gimtex.logging import logger
from gimtex.output_construction import compose_payload
from gimtex.processing import process_files
from gimtex.redaction import SecretScanner
from gimtex.tokens import TokenCounter
from gimtex.tree import render_tree

if TYPE_CHECKING:
    from collections.abc import Callable

    from gimtex.config import Payload
    from gimtex.settings import ScanConfig


def scan(
    config: ScanConfig,
    *,
    count_tokens: Callable[[str], int] | None = None,
    scanner: SecretScanner | None = None,
) -> Payload:
    """Run a full scan of `config.root` and return the assembled payload.

    Args:
        config (ScanConfig): the scan inputs
        count_tokens (Callable[[str], int] | None): token counter; a `TokenCounter` when None
        scanner (SecretScanner | None): secret detectors; the default chain when None

    Raises:
        InvalidGlobError: if `config.filter` is not a valid glob.
        GitError: if diff mode is selected and the git query fails.

    Returns:
        Payload: the payload text and its metrics
    """
    pattern = compile_glob(config.filter)
    counter = count_tokens if count_tokens is not None else TokenCounter()
    detectors = scanner if scanner is not None else SecretScanner()
    root = config.root.resolve()

    logger.info("Scanning target %s", str(config.root), mode=str(config.mode))
    files = discover_files(config.model_copy(update={"root": root}))
    if pattern is not None:
        logger.info("Filtering with %s", pattern)
        files = apply_glob_filter(files, root, pattern)
    entries = to_entries(files, root, config.max_bytes)

    context = inspect_dependencies(root)
    tree = render_tree(str(config.root), [e.rel for e in entries])

    results = process_files(
        entries,
        detectors,
        counter,
        line_numbers=config.line_numbers,
        workers=config.workers,
    )
    payload = compose_payload(tree, results, counter, context=context, fmt=config.format)
    logger.info(
        "Payload assembled",
        files=payload.file_count,
        skipped=payload.skipped_count,
        tokens=payload.token_count,
        chars=payload.char_count,
    )
    return payload
