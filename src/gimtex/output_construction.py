from __future__ import annotations

import io
from typing import TYPE_CHECKING
from xml.sax.saxutils import quoteattr

from gimtex.config import OutputFormat, Payload

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from gimtex.config import ProcessedFile

STRUCTURE_HEADER = "PROJECT STRUCTURE:\n==================\n"
CONTENTS_HEADER = "FILE CONTENTS:\n==================\n\n"


def markdown_block(processed: ProcessedFile) -> str:
    """Render one file as a delimiter line, its content and a blank line."""
    header = f"--- File: {processed.entry.rel} ({processed.tokens} tokens) ---"
    return f"{header}\n{processed.content}\n\n"


def xml_block(processed: ProcessedFile) -> str:
    """Render one file as a `<file>` element carrying path and token count.

    The content is written verbatim between the tags.
    """
    attrs = f"path={quoteattr(processed.entry.rel)} tokens=\"{processed.tokens}\""
    return f"<file {attrs}>\n{processed.content}\n</file>\n"


BLOCK_RENDERERS: dict[OutputFormat, Callable[[ProcessedFile], str]] = {
    OutputFormat.MARKDOWN: markdown_block,
    OutputFormat.XML: xml_block,
}


def build_payload_text(
    tree: str,
    results: Sequence[ProcessedFile | None],
    *,
    context: str | None = None,
    fmt: OutputFormat = OutputFormat.MARKDOWN,
) -> str:
    """Concatenate the context block, the tree and the per-file blocks.

    Args:
        tree (str): the rendered tree view
        results (Sequence[ProcessedFile | None]): processing results in sorted-path order;
            None entries are skipped
        context (str | None): the project context block, if any
        fmt (OutputFormat): the per-file block shape

    Returns:
        str: the payload text
    """
    render = BLOCK_RENDERERS[fmt]
    out = io.StringIO()
    if context:
        out.write(context)
        out.write("\n")
    out.write(STRUCTURE_HEADER)
    out.write(tree)
    out.write("\n\n")
    out.write(CONTENTS_HEADER)
    for processed in results:
        if processed is not None:
            out.write(render(processed))
    return out.getvalue()


def compose_payload(
    tree: str,
    results: Sequence[ProcessedFile | None],
    count_tokens: Callable[[str], int],
    *,
    context: str | None = None,
    fmt: OutputFormat = OutputFormat.MARKDOWN,
) -> Payload:
    """Assemble the payload and measure it.

    The token count is taken over the whole assembled text, headers and
    markup included, not summed from the per-file counts.

    Args:
        tree (str): the rendered tree view
        results (Sequence[ProcessedFile | None]): processing results in sorted-path order
        count_tokens (Callable[[str], int]): the token counter
        context (str | None): the project context block, if any
        fmt (OutputFormat): the per-file block shape

    Returns:
        Payload: the text with its token and character counts
    """
    text = build_payload_text(tree, results, context=context, fmt=fmt)
    rendered = sum(1 for r in results if r is not None)
    return Payload(
        text=text,
        token_count=count_tokens(text),
        file_count=rendered,
        skipped_count=len(results) - rendered,
    )
