from __future__ import annotations

import os
import stat
import subprocess  # noqa: S404
from collections.abc import Callable, Collection
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec

from gimtex.config import DEFAULT_PRUNED_DIRS, SelectionMode
from gimtex.exceptions import GitError
from gimtex.logging import logger

if TYPE_CHECKING:
    from gimtex.settings import ScanConfig

PrunePredicate = Callable[[str], bool]
IgnoreScope = tuple[Path, pathspec.PathSpec]

IGNORE_FILES = (".gitignore", ".ignore")

GIT_DIFF_COMMAND = ("git", "diff", "--name-only", "-z", "--relative", "HEAD")


def is_regular_file(path: Path) -> bool:
    """Check if a path is a regular file and not a symlink.

    Args:
        path (Path): path to test.

    Returns:
        bool: True if the file is regular, False otherwise.
    """
    try:
        st = path.lstat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode)


def _as_predicate(prune: Collection[str] | PrunePredicate) -> PrunePredicate:
    if callable(prune):
        return prune
    names = frozenset(prune)
    return names.__contains__


def _log_walk_error(err: OSError) -> None:
    logger.warning("Access denied: %s", err)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _load_ignore_spec(directory: Path) -> pathspec.PathSpec | None:
    lines: list[str] = []
    for name in IGNORE_FILES:
        p = directory / name
        if not p.is_file():
            continue
        try:
            lines.extend(p.read_text(encoding="utf-8", errors="replace").splitlines())
        except OSError as e:
            logger.warning("Cannot read ignore file %s: %s", str(p), e)
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def _is_ignored(path: Path, specs: list[IgnoreScope], *, is_dir: bool) -> bool:
    for base, spec in specs:
        rel = path.relative_to(base).as_posix()
        if spec.match_file(f"{rel}/" if is_dir else rel):
            return True
    return False


def walk_files(
    root: Path,
    prune: Collection[str] | PrunePredicate = DEFAULT_PRUNED_DIRS,
    *,
    skip_hidden: bool = True,
    use_ignore_files: bool = True,
) -> list[Path]:
    """Walk the directory tree rooted at `root` and return its regular files.

    Directories whose name satisfies `prune` are removed before descending,
    so nothing below them is visited. Hidden entries (a name starting with
    `.`) are skipped, and so is anything matched by a `.gitignore` or
    `.ignore` file of its own directory or of any directory above it, up to
    `root`. Unreadable directories are logged and skipped.

    Args:
        root (Path): the root directory to walk
        prune (Collection[str] | PrunePredicate): directory names to skip, or a
            predicate over directory names. Defaults to `DEFAULT_PRUNED_DIRS`.
        skip_hidden (bool): skip dot files and dot directories
        use_ignore_files (bool): honour `.gitignore` and `.ignore` files

    Returns:
        list[Path]: the regular files found under `root`, in walk order
    """
    should_prune = _as_predicate(prune)
    scopes: dict[str, list[IgnoreScope]] = {}
    results: list[Path] = []
    for dirpath, dirs, files in os.walk(root, onerror=_log_walk_error):
        here = Path(dirpath)
        active = scopes.pop(dirpath, [])
        if use_ignore_files:
            spec = _load_ignore_spec(here)
            if spec is not None:
                active = [*active, (here, spec)]

        kept_dirs: list[str] = []
        for d in dirs:
            if should_prune(d) or (skip_hidden and _is_hidden(d)):
                continue
            if _is_ignored(here / d, active, is_dir=True):
                continue
            kept_dirs.append(d)
            scopes[os.path.join(dirpath, d)] = active
        dirs[:] = kept_dirs

        for f in files:
            if skip_hidden and _is_hidden(f):
                continue
            p = here / f
            if _is_ignored(p, active, is_dir=False):
                continue
            if is_regular_file(p):
                results.append(p)
    return results


def git_diff_files(root: Path) -> list[Path]:
    """List files changed relative to `HEAD`, as reported by `git diff`.

    Names are read NUL-separated so git never quotes them. Paths that no
    longer exist as regular files (deleted or renamed away) are dropped.

    Args:
        root (Path): the directory to run git in; returned paths are under it

    Raises:
        GitError: if git cannot be executed or exits with a non-zero status.

    Returns:
        list[Path]: the changed files that currently exist
    """
    command = " ".join(GIT_DIFF_COMMAND)
    try:
        out = subprocess.run(  # noqa: S603
            list(GIT_DIFF_COMMAND),
            cwd=str(root),
            encoding="utf-8",
            errors="surrogateescape",
            capture_output=True,
            check=False,
        )
    except OSError as e:
        raise GitError(command=command, returncode=-1, stderr=str(e)) from e
    if out.returncode != 0:
        raise GitError(command=command, returncode=out.returncode, stderr=out.stderr)

    files: list[Path] = []
    for name in out.stdout.split("\0"):
        if not name:
            continue
        p = root / name
        if is_regular_file(p):
            files.append(p)
    return files


def discover_files(config: ScanConfig) -> list[Path]:
    """Enumerate candidate files for `config` using its selection mode.

    Args:
        config (ScanConfig): the scan configuration

    Returns:
        list[Path]: candidate files, not yet filtered nor sorted
    """
    if config.mode == SelectionMode.DIFF:
        logger.info("Git diff mode: listing files changed since HEAD")
        return git_diff_files(config.root)
    return walk_files(config.root)
