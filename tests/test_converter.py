"""Tests for docmirror.document.converter: structured document to markdown."""

from __future__ import annotations

from pathlib import Path

import pytest

from docmirror._errors import DecodeError, StorageError
from docmirror.document.assets import AssetMaterializer
from docmirror.document.converter import convert, paragraph_prefix, render_text_run
from docmirror.document.model import (
    EmbeddedImage,
    ImageRef,
    Paragraph,
    ParagraphStyle,
    TextRun,
)

from tests.conftest import GIF_BYTES, data_uri, image_paragraph, make_doc, text_paragraph


class _FailingMaterializer:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.calls = 0

    def materialize(self, data_uri: str) -> str:
        self.calls += 1
        raise self.exc


class TestPrefixes:

    @pytest.mark.parametrize(
        ("style", "prefix"),
        [
            (ParagraphStyle.NONE, ""),
            (ParagraphStyle.HEADING_1, "# "),
            (ParagraphStyle.HEADING_2, "## "),
            (ParagraphStyle.HEADING_3, "### "),
            (ParagraphStyle.BULLET, "* "),
        ],
    )
    def test_prefix(self, style: ParagraphStyle, prefix: str) -> None:
        assert paragraph_prefix(style) == prefix


class TestTextRuns:

    def test_heading_scenario(self) -> None:
        doc = make_doc(text_paragraph("Title", ParagraphStyle.HEADING_2))
        assert convert(doc) == "## Title\n"

    def test_link_label_trimmed(self) -> None:
        doc = make_doc(text_paragraph("  click here  ", link_url="https://x"))
        assert convert(doc) == "[click here](https://x)\n"

    def test_unlinked_whitespace_preserved(self) -> None:
        paragraph = Paragraph(runs=(TextRun("  a "), TextRun(" b  ")))
        assert convert(make_doc(paragraph)) == "  a  b  \n"

    def test_runs_concatenated_without_separator(self) -> None:
        paragraph = Paragraph(
            style=ParagraphStyle.BULLET,
            runs=(TextRun("see "), TextRun("docs", link_url="https://d"), TextRun(".")),
        )
        assert convert(make_doc(paragraph)) == "* see [docs](https://d).\n"

    def test_empty_link_url_is_plain_text(self) -> None:
        assert render_text_run(TextRun(" x ", link_url="")) == " x "

    def test_paragraph_order_preserved(self) -> None:
        doc = make_doc(
            text_paragraph("One", ParagraphStyle.HEADING_1),
            text_paragraph("body"),
            text_paragraph("item", ParagraphStyle.BULLET),
        )
        assert convert(doc) == "# One\nbody\n* item\n"

    def test_empty_document(self) -> None:
        assert convert(make_doc()) == ""

    def test_empty_paragraph_emits_newline(self) -> None:
        assert convert(make_doc(Paragraph())) == "\n"


class TestImages:

    def test_remote_url(self) -> None:
        doc = make_doc(
            image_paragraph("img"),
            images={"img": EmbeddedImage("https://cdn.example/a.png")},
        )
        assert convert(doc) == "\n![image](https://cdn.example/a.png)\n\n"

    def test_unresolved_image_dropped(self) -> None:
        doc = make_doc(
            Paragraph(runs=(TextRun("before"), ImageRef("missing"), TextRun("after"))),
        )
        assert convert(doc) == "beforeafter\n"

    def test_object_without_image_properties_dropped(self) -> None:
        doc = make_doc(image_paragraph("chart"), images={"chart": None})
        assert convert(doc) == "\n"

    def test_image_without_content_uri_dropped(self) -> None:
        doc = make_doc(image_paragraph("img"), images={"img": EmbeddedImage(None)})
        assert convert(doc) == "\n"

    def test_data_uri_materialized(self, images_dir: Path) -> None:
        materializer = AssetMaterializer(images_dir)
        doc = make_doc(image_paragraph("img"), images={"img": EmbeddedImage(data_uri(GIF_BYTES))})

        markup = convert(doc, materializer)

        [written] = list(images_dir.iterdir())
        assert markup == f"\n![image](/static/images/{written.name})\n\n"
        assert written.read_bytes() == GIF_BYTES

    def test_data_uri_without_materializer_skipped(self) -> None:
        doc = make_doc(image_paragraph("img"), images={"img": EmbeddedImage(data_uri(GIF_BYTES))})
        assert convert(doc) == "\n"

    @pytest.mark.parametrize("exc", [DecodeError("bad"), StorageError("disk full")])
    def test_materialization_failure_skips_image(self, exc: Exception) -> None:
        materializer = _FailingMaterializer(exc)
        doc = make_doc(
            Paragraph(runs=(TextRun("a"), ImageRef("img"), TextRun("b"))),
            images={"img": EmbeddedImage(data_uri(GIF_BYTES))},
        )
        assert convert(doc, materializer) == "ab\n"
        assert materializer.calls == 1

    def test_malformed_data_uri_does_not_abort(self, images_dir: Path) -> None:
        doc = make_doc(
            image_paragraph("bad"),
            text_paragraph("still here"),
            images={"bad": EmbeddedImage("data:image/png;base64,!!!not-base64")},
        )
        assert convert(doc, AssetMaterializer(images_dir)) == "\nstill here\n"


class TestDeterminism:

    def test_repeated_conversion_identical(self, images_dir: Path) -> None:
        doc = make_doc(
            text_paragraph("Title", ParagraphStyle.HEADING_1),
            Paragraph(runs=(TextRun("x "), ImageRef("img"), TextRun("y", link_url="https://y"))),
            images={"img": EmbeddedImage(data_uri(GIF_BYTES))},
        )
        materializer = AssetMaterializer(images_dir)
        first = convert(doc, materializer)
        second = convert(doc, materializer)
        assert first == second
        assert len(list(images_dir.iterdir())) == 1

    def test_separate_materializers_same_output(self, tmp_path: Path) -> None:
        doc = make_doc(image_paragraph("img"), images={"img": EmbeddedImage(data_uri(GIF_BYTES))})
        a = convert(doc, AssetMaterializer(tmp_path / "a"))
        b = convert(doc, AssetMaterializer(tmp_path / "b"))
        assert a == b
