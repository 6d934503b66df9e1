from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gimtex.logging import logger

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class Redaction:
    """A span of text to replace with `label`."""

    start: int
    end: int
    label: str


@dataclass(frozen=True)
class SecretPattern:
    """A detector for one kind of secret.

    When `group` is set only that capture group is redacted; the rest of the
    match (key name, separator, quotes) is left untouched.
    """

    name: str
    regex: re.Pattern[str]
    label: str
    group: str | None = None

    def find(self, text: str) -> list[Redaction]:
        """Return the spans of `text` this detector would redact, in order.

        Args:
            text (str): the text to inspect

        Returns:
            list[Redaction]: non-overlapping spans, left to right
        """
        out: list[Redaction] = []
        for m in self.regex.finditer(text):
            start, end = m.span(self.group) if self.group else m.span()
            out.append(Redaction(start=start, end=end, label=self.label))
        return out

    def redact(self, text: str) -> tuple[str, int]:
        """Apply this detector to `text`.

        Args:
            text (str): the text to redact

        Returns:
            tuple[str, int]: the redacted text and the number of replaced spans
        """
        spans = self.find(text)
        if not spans:
            return text, 0
        parts: list[str] = []
        pos = 0
        for span in spans:
            parts.append(text[pos : span.start])
            parts.append(span.label)
            pos = span.end
        parts.append(text[pos:])
        return "".join(parts), len(spans)


GENERIC_SECRET = SecretPattern(
    name="generic-secret",
    regex=re.compile(
        r"""(?i)(api_?key|auth_?token|access_?key|secret|password)\s*[:=]\s*['"](?P<secret>[a-zA-Z0-9_\-]{8,})['"]""",
    ),
    label="[REDACTED_SECRET]",
    group="secret",
)
OPENAI_KEY = SecretPattern(
    name="openai-key",
    regex=re.compile(r"sk-[a-zA-Z0-9]{20,}T3BlbkFJ"),
    label="[REDACTED_OPENAI_KEY]",
)
AWS_ACCESS_KEY_ID = SecretPattern(
    name="aws-access-key-id",
    regex=re.compile(r"AKIA[0-9A-Z]{16}"),
    label="[REDACTED_AWS_KEY]",
)

DEFAULT_PATTERNS: tuple[SecretPattern, ...] = (GENERIC_SECRET, OPENAI_KEY, AWS_ACCESS_KEY_ID)


@dataclass(frozen=True)
class SecretScanner:
    """Ordered chain of secret detectors.

    Detectors run one after the other over the evolving text. No detector's
    label may be matched by any detector of the chain, which makes `scan`
    idempotent; construction fails otherwise.
    """

    patterns: tuple[SecretPattern, ...] = field(default=DEFAULT_PATTERNS)

    def __post_init__(self) -> None:
        for pattern in self.patterns:
            for other in self.patterns:
                if other.find(pattern.label):
                    msg = f"label {pattern.label!r} of {pattern.name} is matched by {other.name}"
                    raise ValueError(msg)

    def redact(self, text: str) -> tuple[str, list[str]]:
        """Run every detector in order.

        Args:
            text (str): the text to redact

        Returns:
            tuple[str, list[str]]: the redacted text and the names of the detectors that matched
        """
        hits: list[str] = []
        for pattern in self.patterns:
            text, count = pattern.redact(text)
            if count:
                hits.append(pattern.name)
        return text, hits

    def scan(self, text: str, path: Path | str) -> str:
        """Redact `text` read from `path`, warning once if anything was found.

        Args:
            text (str): the file content
            path (Path | str): the file the content came from, used in the warning

        Returns:
            str: the redacted content
        """
        sanitized, hits = self.redact(text)
        if hits:
            logger.warning("Potential secret found in file %s", str(path), detectors=hits)
        return sanitized
