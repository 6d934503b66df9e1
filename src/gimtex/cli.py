"""
gimtex: dump a source tree as one LLM-ready payload.

Overview
--------
The payload holds an optional project context (from `Cargo.toml`,
`package.json` or `pyproject.toml`), a tree of the selected files, and one
block per file in markdown or XML. Likely secrets are redacted; lines can be
numbered. The payload goes to stdout, or to the clipboard with `--copy`;
token and character counts are reported on stderr.

Usage
-----
    gimtex .                    # dump current dir to stdout
    gimtex . -c                 # dump and copy to clipboard
    gimtex src/ -i "*.rs"       # dump only Rust files in src/
    gimtex --diff --format xml  # dump git changes as XML
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pyperclip
from pydantic import ValidationError

from gimtex import __version__
from gimtex.config import OutputFormat, SelectionMode
from gimtex.exceptions import GimtexError
from gimtex.logging import logger, setup_logging
from gimtex.scanner import scan
from gimtex.settings import EnvDefaults, ScanConfig

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gimtex.config import Payload

EXAMPLES = """
examples:
  gimtex .                    # dump current dir to stdout
  gimtex -c .                 # dump and copy to clipboard
  gimtex src/ -i "*.rs"       # dump only Rust files in src/
  gimtex --diff --format xml  # dump git changes in XML format
"""


def build_parser(defaults: EnvDefaults | None = None) -> argparse.ArgumentParser:
    env = defaults or EnvDefaults()
    p = argparse.ArgumentParser(
        prog="gimtex",
        description="Dump a directory as a single text payload for LLM context.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("path", nargs="?", default=None, help="Directory to scan.")
    p.add_argument("-c", "--copy", action="store_true", help="Copy the payload to the clipboard.")
    p.add_argument(
        "-f",
        "--format",
        type=str,
        choices=[f.value for f in OutputFormat],
        default=env.format,
        help="Output format (default: %(default)s).",
    )
    p.add_argument("-i", "--filter", type=str, default=None, help='Glob over relative paths, e.g. "*.rs".')
    p.add_argument("-d", "--diff", action="store_true", help="Only files changed since HEAD in git.")
    p.add_argument("-n", "--numbers", action="store_true", help="Prefix lines with line numbers.")
    p.add_argument(
        "--max-bytes",
        type=int,
        default=env.max_bytes,
        help="Skip files larger than this many bytes.",
    )
    p.add_argument("--workers", type=int, default=env.workers, help="Worker threads (default: CPU count).")
    p.add_argument("--log-file", type=str, default=env.log_file, help="Log file path.")
    return p


def to_scan_config(args: argparse.Namespace) -> ScanConfig:
    """Translate parsed arguments into a `ScanConfig`.

    With `--diff` and no path the current directory is scanned.
    """
    return ScanConfig(
        root=Path(args.path or "."),
        mode=SelectionMode.DIFF if args.diff else SelectionMode.WALK,
        filter=args.filter,
        format=args.format,
        line_numbers=args.numbers,
        max_bytes=args.max_bytes,
        workers=args.workers,
    )


def deliver(payload: Payload, *, copy: bool) -> None:
    """Send the payload to the clipboard or stdout.

    A clipboard failure is logged and the payload is printed instead.
    """
    if copy:
        try:
            pyperclip.copy(payload.text)
        except pyperclip.PyperclipException as e:
            logger.error("Clipboard failure, writing payload to stdout: %s", e)
        else:
            sys.stderr.write(f"Payload copied: {payload.file_count} files, {payload.char_count} chars.\n")
            return
    sys.stdout.write(payload.text)
    sys.stdout.write("\n")


def print_metrics(payload: Payload) -> None:
    sys.stderr.write(f"Payload Metrics: {payload.token_count} tokens | {payload.char_count} chars\n")


def main(argv: Sequence[str] | None = None) -> int:
    try:
        defaults = EnvDefaults.load()
    except ValidationError as e:
        sys.stderr.write(f"error: invalid GIMTEX_* defaults: {e}\n")
        return 2
    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    if args.log_file:
        setup_logging(args.log_file)

    if args.path is None and not args.diff:
        parser.print_help()
        return 0

    try:
        config = to_scan_config(args)
    except ValidationError as e:
        sys.stderr.write(f"error: invalid options: {e}\n")
        return 2

    try:
        payload = scan(config)
    except GimtexError as e:
        logger.error("Scan aborted: %s", e)
        sys.stderr.write(f"error: {e}\n")
        return 1

    deliver(payload, copy=args.copy)
    print_metrics(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
