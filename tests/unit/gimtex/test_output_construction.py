from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

import pytest

from gimtex.config import FileEntry, OutputFormat, ProcessedFile
from gimtex.output_construction import CONTENTS_HEADER, STRUCTURE_HEADER, build_payload_text, compose_payload

if TYPE_CHECKING:
    from collections.abc import Callable


def _processed(rel: str, content: str, tokens: int) -> ProcessedFile:
    entry = FileEntry(path=Path("/repo") / rel, rel=rel, size=len(content))
    return ProcessedFile(entry=entry, content=content, tokens=tokens)


TREE = "repo\n├── a.py\n└── b.py\n"


@pytest.mark.unit
def test_markdown_payload_has_one_block_per_file_in_order() -> None:
    results = [_processed("a.py", "print('a')", 3), None, _processed("b.py", "print('b')", 4)]

    text = build_payload_text(TREE, results, fmt=OutputFormat.MARKDOWN)

    headers = re.findall(r"^--- File: (\S+) \((\d+) tokens\) ---$", text, flags=re.MULTILINE)
    assert headers == [("a.py", "3"), ("b.py", "4")]
    assert "--- File: a.py (3 tokens) ---\nprint('a')\n\n--- File: b.py (4 tokens) ---\nprint('b')\n\n" in text


@pytest.mark.unit
def test_payload_layout_with_context() -> None:
    context = "PROJECT CONTEXT:\n================\n[+] Project: demo (Python)\n\n"

    text = build_payload_text(TREE, [], context=context)

    assert text == context + "\n" + STRUCTURE_HEADER + TREE + "\n\n" + CONTENTS_HEADER


@pytest.mark.unit
def test_payload_layout_without_context_starts_with_structure() -> None:
    assert build_payload_text(TREE, []).startswith(STRUCTURE_HEADER)


@pytest.mark.unit
def test_xml_payload_elements_are_well_formed() -> None:
    results = [_processed("a.py", "if a < b:\n    pass", 5), _processed("dir/b.py", "x = 1", 2)]

    text = build_payload_text(TREE, results, fmt=OutputFormat.XML)

    blocks = re.findall(r"<file .*?</file>\n", text, flags=re.DOTALL)
    assert len(blocks) == 2  # noqa: PLR2004
    assert blocks[1] == '<file path="dir/b.py" tokens="2">\nx = 1\n</file>\n'
    assert "\nif a < b:\n    pass\n</file>" in blocks[0]
    parsed = ET.fromstring(blocks[1])
    assert parsed.attrib == {"path": "dir/b.py", "tokens": "2"}


@pytest.mark.unit
def test_xml_path_attribute_is_escaped() -> None:
    text = build_payload_text(TREE, [_processed('we"ird&.txt', "ok", 1)], fmt=OutputFormat.XML)

    element = ET.fromstring(text[text.index("<file") :].strip())
    assert element.attrib["path"] == 'we"ird&.txt'


@pytest.mark.unit
def test_compose_payload_counts_the_whole_text(count_words: Callable[[str], int]) -> None:
    results = [_processed("a.py", "one two", 2), None]

    payload = compose_payload(TREE, results, count_words)

    assert payload.token_count == count_words(payload.text)
    assert payload.token_count > sum(r.tokens for r in results if r is not None)
    assert payload.char_count == len(payload.text)
    assert payload.file_count == 1
    assert payload.skipped_count == 1
