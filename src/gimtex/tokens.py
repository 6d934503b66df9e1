"""Token counting with a byte-pair-encoding vocabulary."""

from __future__ import annotations

import threading

import tiktoken

from gimtex.config import DEFAULT_ENCODING


class TokenCounter:
    """Count tokens of arbitrary text with a fixed tiktoken encoding.

    The encoding is loaded on first use and then shared read-only, so one
    instance can serve every worker of a scan.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING) -> None:
        self._encoding_name = encoding_name
        self._encoding: tiktoken.Encoding | None = None
        self._lock = threading.Lock()

    @property
    def encoding_name(self) -> str:
        return self._encoding_name

    @property
    def encoding(self) -> tiktoken.Encoding:
        """Lazy-load the encoding."""
        if self._encoding is None:
            with self._lock:
                if self._encoding is None:
                    self._encoding = tiktoken.get_encoding(self._encoding_name)
        return self._encoding

    def count(self, text: str) -> int:
        """Return the number of tokens in `text`, special tokens included.

        Args:
            text (str): the text to tokenize

        Returns:
            int: the token count
        """
        if not text:
            return 0
        return len(self.encoding.encode(text, allowed_special="all"))

    def __call__(self, text: str) -> int:
        return self.count(text)
