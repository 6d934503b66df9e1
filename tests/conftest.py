from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable


def _count_words(text: str) -> int:
    return len(text.split())


@pytest.fixture
def count_words() -> Callable[[str], int]:
    """A deterministic stand-in for the BPE counter: one token per whitespace-separated word."""
    return _count_words
