from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from gimtex.config import OutputFormat, SelectionMode

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "GIMTEX_"


class ScanConfig(BaseModel):
    """Inputs of one scan. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: Path = Field(default_factory=lambda: Path("."), description="Scan root.")
    mode: SelectionMode = Field(default=SelectionMode.WALK, description="File selection strategy.")
    filter: str | None = Field(default=None, description="Optional glob over root-relative paths.")
    format: OutputFormat = Field(default=OutputFormat.MARKDOWN, description="Output block shape.")
    line_numbers: bool = Field(default=False, description="Prefix every line with its number.")
    max_bytes: int | None = Field(default=None, description="Files above this size are not scanned.")
    workers: int | None = Field(default=None, description="Worker pool size; CPU count when unset.")

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in {"md", ""}:
                return OutputFormat.MARKDOWN
            return normalized
        return value

    @field_validator("max_bytes", "workers")
    @classmethod
    def _positive(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            msg = "must be a positive integer"
            raise ValueError(msg)
        return value


class EnvDefaults(BaseModel):
    """Defaults read from `GIMTEX_*` variables and the nearest `.env` file.

    Process environment wins over the `.env` file; command-line flags win over both.
    """

    model_config = ConfigDict(frozen=True)

    format: str = Field(default="markdown", description="Default output format.")
    max_bytes: int | None = Field(default=None, description="Default max file size.")
    workers: int | None = Field(default=None, description="Default worker count.")
    log_file: str = Field(default="", description="Default log file path.")

    @field_validator("max_bytes", "workers", mode="before")
    @classmethod
    def _empty_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def load(cls, env_file: str | Path | None = None) -> EnvDefaults:
        """Collect defaults from `env_file` (or `ENV_FILE`) overlaid by `os.environ`.

        Args:
            env_file: optional dotenv file to read instead of the discovered one.

        Returns:
            EnvDefaults: the merged defaults.
        """
        source = env_file if env_file is not None else ENV_FILE
        values: dict[str, str | None] = dict(dotenv_values(source)) if source else {}
        values.update(os.environ)
        data = {
            key[len(ENV_PREFIX) :].lower(): value
            for key, value in values.items()
            if key.startswith(ENV_PREFIX) and value is not None
        }
        return cls(**{k: v for k, v in data.items() if k in cls.model_fields})
