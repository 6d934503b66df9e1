from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

_ = Path()


class SelectionMode(StrEnum):
    """How candidate files are enumerated."""

    WALK = auto()
    DIFF = auto()


class OutputFormat(StrEnum):
    """Shape of the per-file blocks in the payload.

    `XML` is the structured-markup shape: one `<file>` element per file.
    """

    MARKDOWN = auto()
    XML = auto()


DEFAULT_PRUNED_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        "target",
        "dist",
        "build",
        "vendor",
        ".next",
        "__pycache__",
        ".venv",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
    },
)

BINARY_PROBE_BYTES = 1024
MAX_DEPENDENCIES = 15
DEFAULT_ENCODING = "cl100k_base"


class FileEntry(BaseModel):
    """A regular file retained for the payload.

    Attributes:
        path: Absolute path to the file on disk.
        rel: Path relative to the scan root, with POSIX separators.
        size: File size in bytes at discovery time.
    """

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute file path")
    rel: str = Field(..., description="File path relative to the scan root")
    size: int = Field(default=0, ge=0, description="File size in bytes")


class ProcessedFile(BaseModel):
    """Transformed content of one file, ready to be rendered."""

    model_config = ConfigDict(frozen=True)

    entry: FileEntry
    content: str
    tokens: int = Field(..., ge=0)


class Payload(BaseModel):
    """The assembled output and its aggregate metrics."""

    model_config = ConfigDict(frozen=True)

    text: str
    token_count: int = Field(..., ge=0, description="Tokens of the whole payload text")
    file_count: int = Field(default=0, ge=0, description="Files rendered into the payload")
    skipped_count: int = Field(default=0, ge=0, description="Files dropped while processing")

    @computed_field
    @property
    def char_count(self) -> int:
        """Character length of the payload text."""
        return len(self.text)
