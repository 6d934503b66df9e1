from dataclasses import dataclass


@dataclass(frozen=True)
class GimtexError(Exception):
    """Base exception for errors that abort a scan."""


@dataclass(frozen=True)
class GitError(GimtexError):
    """Raised when the git change query fails."""

    command: str
    returncode: int
    stderr: str = ""

    def __str__(self) -> str:
        detail = self.stderr.strip() or "no output"
        return f"git command failed ({self.returncode}): {self.command}: {detail}"


@dataclass(frozen=True)
class InvalidGlobError(GimtexError):
    """Raised when the file filter is not a valid glob pattern."""

    pattern: str
    reason: str

    def __str__(self) -> str:
        return f"Invalid glob pattern {self.pattern!r}: {self.reason}"
