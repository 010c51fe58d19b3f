"""Structured document model: the input to the markup converter.

A StructuredDocument is an ordered sequence of paragraphs plus a side table
of inline objects.  ``StructuredDocument.from_api`` builds one from a Google
Docs ``documents.get`` payload, skipping anything it does not understand.

Thread Safety:
    All model objects are frozen and safe to share across threads.

"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


class ParagraphStyle(enum.Enum):
    """Named paragraph styles understood by the converter."""

    NONE = "NONE"
    HEADING_1 = "HEADING_1"
    HEADING_2 = "HEADING_2"
    HEADING_3 = "HEADING_3"
    BULLET = "BULLET"


_NAMED_STYLES = {
    "HEADING_1": ParagraphStyle.HEADING_1,
    "HEADING_2": ParagraphStyle.HEADING_2,
    "HEADING_3": ParagraphStyle.HEADING_3,
}


@dataclass(frozen=True, slots=True)
class TextRun:
    """A run of text, optionally hyperlinked.

    Attributes:
        text: Raw run content, whitespace included.
        link_url: Link target, or None for plain text.

    """

    text: str
    link_url: str | None = None


@dataclass(frozen=True, slots=True)
class ImageRef:
    """A reference to an inline object in the document's side table."""

    object_id: str


type InlineRun = TextRun | ImageRef


@dataclass(frozen=True, slots=True)
class Paragraph:
    """A block of inline runs with a single paragraph style."""

    style: ParagraphStyle = ParagraphStyle.NONE
    runs: tuple[InlineRun, ...] = ()


@dataclass(frozen=True, slots=True)
class EmbeddedImage:
    """Image properties of an inline object.

    Attributes:
        content_uri: Remote URL or ``data:image/...;base64,`` URI, or None
            when the object carries image properties without a source.

    """

    content_uri: str | None = None


def _frozen_mapping(
    data: Mapping[str, EmbeddedImage | None] | None = None,
) -> Mapping[str, EmbeddedImage | None]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True, slots=True)
class StructuredDocument:
    """An ordered sequence of paragraphs plus the inline object table.

    Attributes:
        paragraphs: Paragraph blocks in document order.
        inline_objects: Object id -> image properties.  A ``None`` value means
            the object exists but is not an image.

    """

    paragraphs: tuple[Paragraph, ...] = ()
    inline_objects: Mapping[str, EmbeddedImage | None] = field(
        default_factory=_frozen_mapping,
    )
    title: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.inline_objects, MappingProxyType):
            object.__setattr__(self, "inline_objects", _frozen_mapping(self.inline_objects))

    def resolve_image(self, object_id: str) -> EmbeddedImage | None:
        """Return the image for object_id, or None if it does not resolve."""
        return self.inline_objects.get(object_id)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> StructuredDocument:
        """Build a StructuredDocument from a Google Docs API payload.

        Structural elements other than paragraphs (tables, section breaks,
        tables of contents) are skipped, as are paragraph elements other than
        text runs and inline objects.

        """
        body = payload.get("body") or {}
        paragraphs: list[Paragraph] = []
        for element in body.get("content") or ():
            paragraph = element.get("paragraph") if isinstance(element, dict) else None
            if isinstance(paragraph, dict):
                paragraphs.append(_paragraph_from_api(paragraph))

        inline_objects: dict[str, EmbeddedImage | None] = {}
        for object_id, obj in (payload.get("inlineObjects") or {}).items():
            inline_objects[object_id] = _image_from_api(obj)

        return cls(
            paragraphs=tuple(paragraphs),
            inline_objects=inline_objects,
            title=str(payload.get("title") or ""),
        )


def _paragraph_from_api(paragraph: Mapping[str, Any]) -> Paragraph:
    runs: list[InlineRun] = []
    for element in paragraph.get("elements") or ():
        if not isinstance(element, dict):
            continue
        text_run = element.get("textRun")
        if isinstance(text_run, dict):
            link = (text_run.get("textStyle") or {}).get("link") or {}
            runs.append(TextRun(
                text=str(text_run.get("content") or ""),
                link_url=link.get("url") or None,
            ))
            continue
        inline = element.get("inlineObjectElement")
        if isinstance(inline, dict) and inline.get("inlineObjectId"):
            runs.append(ImageRef(object_id=str(inline["inlineObjectId"])))

    return Paragraph(style=_style_from_api(paragraph), runs=tuple(runs))


def _style_from_api(paragraph: Mapping[str, Any]) -> ParagraphStyle:
    """Bullets win over named heading styles."""
    if paragraph.get("bullet") is not None:
        return ParagraphStyle.BULLET
    named = (paragraph.get("paragraphStyle") or {}).get("namedStyleType")
    if not isinstance(named, str):
        return ParagraphStyle.NONE
    return _NAMED_STYLES.get(named, ParagraphStyle.NONE)


def _image_from_api(obj: object) -> EmbeddedImage | None:
    if not isinstance(obj, dict):
        return None
    embedded = (obj.get("inlineObjectProperties") or {}).get("embeddedObject") or {}
    image = embedded.get("imageProperties")
    if not isinstance(image, dict):
        return None
    return EmbeddedImage(content_uri=image.get("contentUri") or None)
