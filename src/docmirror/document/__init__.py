"""Document layer: model, conversion to markdown, and image materialization."""

from docmirror.document.assets import AssetFile, AssetMaterializer
from docmirror.document.converter import convert
from docmirror.document.fetcher import DocumentFetcher, GoogleDocsFetcher
from docmirror.document.model import (
    EmbeddedImage,
    ImageRef,
    Paragraph,
    ParagraphStyle,
    StructuredDocument,
    TextRun,
)

__all__ = [
    "AssetFile",
    "AssetMaterializer",
    "DocumentFetcher",
    "EmbeddedImage",
    "GoogleDocsFetcher",
    "ImageRef",
    "Paragraph",
    "ParagraphStyle",
    "StructuredDocument",
    "TextRun",
    "convert",
]
