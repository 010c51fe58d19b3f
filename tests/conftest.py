"""Shared test fixtures for docmirror."""

from __future__ import annotations

import base64
import threading
from pathlib import Path

import pytest

from docmirror._errors import FetchError
from docmirror.config import MirrorConfig
from docmirror.document.model import (
    EmbeddedImage,
    ImageRef,
    Paragraph,
    ParagraphStyle,
    StructuredDocument,
    TextRun,
)

GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"


def data_uri(data: bytes, mime_type: str = "image/gif") -> str:
    """Build a ``data:<mime>;base64,<payload>`` URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def make_doc(
    *paragraphs: Paragraph,
    images: dict[str, EmbeddedImage | None] | None = None,
) -> StructuredDocument:
    return StructuredDocument(paragraphs=paragraphs, inline_objects=images or {})


def text_paragraph(
    text: str,
    style: ParagraphStyle = ParagraphStyle.NONE,
    link_url: str | None = None,
) -> Paragraph:
    return Paragraph(style=style, runs=(TextRun(text=text, link_url=link_url),))


def image_paragraph(object_id: str) -> Paragraph:
    return Paragraph(runs=(ImageRef(object_id=object_id),))


class FakeFetcher:
    """Scripted fetch collaborator.

    Returns ``document`` on every call unless ``error`` is set, in which case
    ``FetchError(error)`` is raised.  Calls are counted and may be delayed to
    simulate a slow remote.
    """

    def __init__(
        self,
        document: StructuredDocument | None = None,
        *,
        error: str | None = None,
        delay: float = 0.0,
    ) -> None:
        self.document = document if document is not None else make_doc(text_paragraph("Hello"))
        self.error = error
        self.delay = delay
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.release = threading.Event()
        self._lock = threading.Lock()

    def fetch(self, document_id: str) -> StructuredDocument:
        with self._lock:
            self.calls += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                self.release.wait(self.delay)
            if self.error is not None:
                raise FetchError(self.error)
            return self.document
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def config(tmp_path: Path) -> MirrorConfig:
    """A MirrorConfig rooted at a temp directory."""
    return MirrorConfig(root=tmp_path, doc_id="doc-123")


@pytest.fixture
def images_dir(tmp_path: Path) -> Path:
    return tmp_path / "static" / "images"
