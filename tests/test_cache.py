"""Tests for docmirror.live.cache: the rendered content snapshot."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest

from docmirror.live.cache import EPOCH, ContentCache, RenderedContent, format_long_date


class TestRenderedContent:

    def test_default_is_empty(self) -> None:
        content = RenderedContent()
        assert content.markup == ""
        assert content.html == ""
        assert content.rendered_at == EPOCH
        assert content.is_empty
        assert content.title == ""

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            RenderedContent().markup = "x"  # type: ignore[misc]


class TestFormatLongDate:

    def test_long_date(self) -> None:
        assert format_long_date(datetime(2006, 1, 2, 15, 4, 5, tzinfo=UTC)) == "January 2, 2006"

    def test_no_zero_padding(self) -> None:
        assert format_long_date(datetime(2024, 11, 9, tzinfo=UTC)) == "November 9, 2024"

    def test_year_padded_to_four_digits(self) -> None:
        assert format_long_date(datetime(987, 3, 4, tzinfo=UTC)) == "March 4, 0987"

    def test_initial_snapshot_label(self) -> None:
        assert ContentCache().last_update_label() == "Last updated: January 1, 0001"


class TestContentCache:

    def test_initial_empty(self) -> None:
        cache = ContentCache()
        assert cache.get().is_empty

    def test_initial_snapshot(self) -> None:
        snapshot = RenderedContent("a", "<p>a</p>", datetime(2024, 1, 1, tzinfo=UTC))
        assert ContentCache(snapshot).get() is snapshot

    def test_replace(self) -> None:
        cache = ContentCache()
        stamp = datetime(2024, 5, 1, tzinfo=UTC)
        stored = cache.replace(RenderedContent("# Hi\n", "<h1>Hi</h1>", stamp))
        assert cache.get() == stored
        assert stored.rendered_at == stamp
        assert not stored.is_empty

    def test_timestamps_strictly_increase(self) -> None:
        cache = ContentCache()
        stamp = datetime(2024, 5, 1, tzinfo=UTC)
        first = cache.replace(RenderedContent("a", "a", stamp))
        second = cache.replace(RenderedContent("b", "b", stamp))
        third = cache.replace(RenderedContent("c", "c", stamp - timedelta(days=1)))
        assert first.rendered_at < second.rendered_at < third.rendered_at
        assert third.markup == "c"

    def test_title_survives_timestamp_bump(self) -> None:
        cache = ContentCache()
        stamp = datetime(2024, 5, 1, tzinfo=UTC)
        cache.replace(RenderedContent("a", "a", stamp, title="First"))
        bumped = cache.replace(RenderedContent("b", "b", stamp, title="Second"))
        assert bumped.rendered_at > stamp
        assert cache.get().title == "Second"

    def test_last_update_label(self) -> None:
        cache = ContentCache()
        cache.replace(RenderedContent("", "", datetime(2006, 1, 2, tzinfo=UTC)))
        assert cache.last_update_label() == "Last updated: January 2, 2006"

    def test_concurrent_readers_see_whole_snapshots(self) -> None:
        cache = ContentCache()
        stamp = datetime(2024, 1, 1, tzinfo=UTC)
        torn: list[RenderedContent] = []
        done = threading.Event()

        def reader() -> None:
            while not done.is_set():
                snapshot = cache.get()
                if snapshot.markup != snapshot.html:
                    torn.append(snapshot)

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()
        for i in range(200):
            cache.replace(RenderedContent(str(i), str(i), stamp))
        done.set()
        for t in readers:
            t.join(timeout=2)

        assert torn == []
        assert cache.get().markup == "199"
