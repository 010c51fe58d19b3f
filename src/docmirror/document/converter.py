"""Markup converter: StructuredDocument to markdown text.

Walks paragraphs in document order, emitting a style prefix, the inline
runs, and a trailing newline.  Conversion never fails: unresolvable images
and images that cannot be materialized are left out of the output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from docmirror._errors import AssetError
from docmirror.document.model import ImageRef, ParagraphStyle, TextRun

if TYPE_CHECKING:
    from docmirror._types import AssetRef
    from docmirror.document.model import Paragraph, StructuredDocument


class Materializer(Protocol):
    """Anything that turns a data URI into a reference path."""

    def materialize(self, data_uri: str) -> AssetRef: ...


_PREFIXES: dict[ParagraphStyle, str] = {
    ParagraphStyle.BULLET: "* ",
    ParagraphStyle.HEADING_1: "# ",
    ParagraphStyle.HEADING_2: "## ",
    ParagraphStyle.HEADING_3: "### ",
}

_DATA_IMAGE_PREFIX = "data:image/"


def paragraph_prefix(style: ParagraphStyle) -> str:
    """Return the markdown prefix for a paragraph style."""
    return _PREFIXES.get(style, "")


def convert(doc: StructuredDocument, materializer: Materializer | None = None) -> str:
    """Convert a structured document to markdown.

    Args:
        doc: The document to convert.
        materializer: Persists ``data:image/`` URIs.  When None, embedded
            data-URI images are skipped.

    Returns:
        Markdown text.  Identical input always yields identical output.

    """
    parts: list[str] = []
    for paragraph in doc.paragraphs:
        _convert_paragraph(paragraph, doc, materializer, parts)
    return "".join(parts)


def _convert_paragraph(
    paragraph: Paragraph,
    doc: StructuredDocument,
    materializer: Materializer | None,
    out: list[str],
) -> None:
    out.append(paragraph_prefix(paragraph.style))
    for run in paragraph.runs:
        if isinstance(run, TextRun):
            out.append(render_text_run(run))
        elif isinstance(run, ImageRef):
            out.append(_render_image(run, doc, materializer))
    out.append("\n")


def render_text_run(run: TextRun) -> str:
    """Linked runs become ``[label](url)`` with a trimmed label; others pass through."""
    if run.link_url:
        return f"[{run.text.strip()}]({run.link_url})"
    return run.text


def _render_image(
    ref: ImageRef,
    doc: StructuredDocument,
    materializer: Materializer | None,
) -> str:
    image = doc.resolve_image(ref.object_id)
    if image is None or not image.content_uri:
        return ""

    uri = image.content_uri
    if uri.startswith(_DATA_IMAGE_PREFIX):
        if materializer is None:
            return ""
        try:
            uri = materializer.materialize(uri)
        except AssetError:
            return ""

    return f"\n![image]({uri})\n"
