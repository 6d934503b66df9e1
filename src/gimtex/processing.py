from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from gimtex.config import BINARY_PROBE_BYTES, FileEntry, ProcessedFile
from gimtex.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from gimtex.redaction import SecretScanner

    CountFn = Callable[[str], int]


def split_lines(text: str) -> list[str]:
    """Split `text` on `\\n`, dropping a trailing `\\r` and the empty tail after a final newline.

    Args:
        text (str): the text to split

    Returns:
        list[str]: the lines, without terminators
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [ln.removesuffix("\r") for ln in lines]


def number_lines(text: str, width: int = 4) -> str:
    """Prefix each line with its right-aligned 1-based number.

    Args:
        text (str): the content to annotate
        width (int): the width of the number column. Defaults to 4.

    Returns:
        str: the annotated content, every line terminated by a newline
    """
    return "".join(f"{i:>{width}} | {line}\n" for i, line in enumerate(split_lines(text), start=1))


def is_binary(entry: FileEntry) -> bool:
    """Check whether the first `BINARY_PROBE_BYTES` bytes of a file contain a zero byte.

    Raises:
        OSError: if the file cannot be opened or read.
    """
    with entry.path.open("rb") as f:
        probe = f.read(BINARY_PROBE_BYTES)
    return b"\x00" in probe


def process_file(
    entry: FileEntry,
    scanner: SecretScanner,
    count_tokens: CountFn,
    *,
    line_numbers: bool = False,
) -> ProcessedFile | None:
    """Read, redact, optionally number and measure one file.

    Binary, unreadable and non UTF-8 files are skipped with a warning.

    Args:
        entry (FileEntry): the file to process
        scanner (SecretScanner): the shared secret detectors
        count_tokens (CountFn): the shared token counter
        line_numbers (bool): whether to prefix lines with their number

    Returns:
        ProcessedFile | None: the processed file, or None if it was skipped
    """
    try:
        if is_binary(entry):
            logger.warning("Skipping binary file %s", entry.rel)
            return None
        content = entry.path.read_bytes().decode("utf-8")
    except OSError as e:
        logger.warning("Skipping %s: %s", entry.rel, e)
        return None
    except UnicodeDecodeError as e:
        logger.warning("Skipping %s: not valid UTF-8 (%s)", entry.rel, e.reason)
        return None

    content = scanner.scan(content, entry.rel)
    if line_numbers:
        content = number_lines(content)
    return ProcessedFile(entry=entry, content=content, tokens=count_tokens(content))


def resolve_worker_count(workers: int | None, jobs: int) -> int:
    """Size the pool: `workers` if given, else the CPU count, never more than `jobs`."""
    wanted = workers if workers is not None else (os.cpu_count() or 1)
    return max(1, min(wanted, jobs))


def process_files(
    entries: Sequence[FileEntry],
    scanner: SecretScanner,
    count_tokens: CountFn,
    *,
    line_numbers: bool = False,
    workers: int | None = None,
) -> list[ProcessedFile | None]:
    """Process files concurrently, keeping results aligned with `entries`.

    Each task writes its result into a pre-sized buffer at the index of its
    entry, so the output order never depends on completion order.

    Args:
        entries (Sequence[FileEntry]): the sorted, filtered entries
        scanner (SecretScanner): the shared secret detectors
        count_tokens (CountFn): the shared token counter
        line_numbers (bool): whether to prefix lines with their number
        workers (int | None): pool size; the CPU count when None

    Returns:
        list[ProcessedFile | None]: result `i` belongs to `entries[i]`; None marks a skipped file
    """
    results: list[ProcessedFile | None] = [None] * len(entries)
    if not entries:
        return results
    worker_count = resolve_worker_count(workers, len(entries))
    with ThreadPoolExecutor(max_workers=worker_count) as pool:
        futures = {
            pool.submit(process_file, entry, scanner, count_tokens, line_numbers=line_numbers): idx
            for idx, entry in enumerate(entries)
        }
        for future in as_completed(futures):
            results[futures[future]] = future.result()
    return results
