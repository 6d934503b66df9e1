from __future__ import annotations

import fnmatch
import itertools
from typing import TYPE_CHECKING

from gimtex.config import FileEntry
from gimtex.discovery import is_regular_file
from gimtex.exceptions import InvalidGlobError
from gimtex.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _unclosed_class(pattern: str) -> bool:
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                return True
            i = j
        i += 1
    return False


def compile_glob(pattern: str | None) -> str | None:
    """Validate and normalize a glob filter.

    Backslashes are turned into forward slashes. A `**` wildcard is only
    accepted as a whole path component (`**`, `src/**`, `**/x.py`).

    Args:
        pattern (str | None): the user supplied glob, or None

    Raises:
        InvalidGlobError: if the pattern is empty, has an unclosed character
            class, or uses `**` inside a path component.

    Returns:
        str | None: the normalized pattern, or None when no filter is set
    """
    if pattern is None:
        return None
    normalized = pattern.strip().replace("\\", "/")
    if not normalized:
        raise InvalidGlobError(pattern=pattern, reason="empty pattern")
    if _unclosed_class(normalized):
        raise InvalidGlobError(pattern=pattern, reason="unclosed character class")
    for part in normalized.split("/"):
        if "**" in part and part != "**":
            raise InvalidGlobError(
                pattern=pattern,
                reason="recursive wildcards must form a single path component",
            )
    return normalized


def _recursive_variants(pattern: str) -> list[str]:
    """Expand every `**/` of `pattern` into "present" and "absent" forms.

    `fnmatch` needs a literal `/` after `**`, so `**/x.py` alone would miss a
    top-level `x.py`. Matching any variant lets `**/` stand for zero or more
    directories.
    """
    parts = pattern.split("/")
    last = len(parts) - 1
    choices = [("**/", "") if part == "**" and i < last else (f"{part}/",) for i, part in enumerate(parts)]
    variants = {"".join(combo)[:-1] for combo in itertools.product(*choices)}
    return sorted(v for v in variants if v)


def apply_glob_filter(files: Sequence[Path], root: Path, pattern: str | None) -> list[Path]:
    """Keep the files whose root-relative path matches `pattern`.

    `*` also matches across `/`, so `*.py` selects Python files at any depth.
    A `**/` component matches zero or more directories.

    Args:
        files (Sequence[Path]): the discovered files
        root (Path): the scan root
        pattern (str | None): a pattern returned by `compile_glob`; None keeps everything

    Returns:
        list[Path]: the matching files, in input order
    """
    if pattern is None:
        return list(files)
    variants = _recursive_variants(pattern)
    return [f for f in files if any(fnmatch.fnmatchcase(relpath(f, root), v) for v in variants)]


def to_entries(files: Sequence[Path], root: Path, max_bytes: int | None = None) -> list[FileEntry]:
    """Turn paths into sorted, unique `FileEntry` records.

    Non-regular files and files larger than `max_bytes` are dropped before
    any content is read.

    Args:
        files (Sequence[Path]): the filtered files
        root (Path): the scan root
        max_bytes (int | None): the size bound, or None for no bound

    Returns:
        list[FileEntry]: entries sorted by relative path
    """
    seen: dict[str, FileEntry] = {}
    for f in files:
        if not is_regular_file(f):
            continue
        try:
            size = f.stat().st_size
        except OSError as e:
            logger.warning("Skipping %s: %s", str(f), e)
            continue
        rel = relpath(f, root)
        if max_bytes is not None and size > max_bytes:
            logger.info("Skipping %s: %d bytes exceeds max size %d", rel, size, max_bytes)
            continue
        seen.setdefault(rel, FileEntry(path=f, rel=rel, size=size))
    return [seen[rel] for rel in sorted(seen)]
