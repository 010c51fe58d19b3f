"""Content cache: the latest rendered snapshot of the mirrored document.

Holds exactly one ``RenderedContent`` at a time.  ``get()`` calls share a
read lock; ``replace()`` takes the write lock, so readers never observe a
half-written snapshot and writers never race each other.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta

from docmirror._locks import ReadWriteLock

EPOCH = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class RenderedContent:
    """An immutable rendered snapshot.

    Attributes:
        markup: Markdown produced by the converter.
        html: HTML rendering of ``markup``.
        rendered_at: When the snapshot was produced (UTC).  ``EPOCH`` for the
            initial empty snapshot.
        title: Document title, shown as the page title.

    """

    markup: str = ""
    html: str = ""
    rendered_at: datetime = EPOCH
    title: str = ""

    @property
    def is_empty(self) -> bool:
        """True for the initial snapshot, before any successful sync."""
        return self.rendered_at == EPOCH


def format_long_date(moment: datetime) -> str:
    """Format as a long-form calendar date, e.g. ``January 2, 2006``.

    Years are zero-padded to four digits, so the initial snapshot reads
    ``January 1, 0001``.
    """
    return f"{moment:%B} {moment.day}, {moment.year:04d}"


class ContentCache:
    """Reader/writer-guarded holder of the current ``RenderedContent``.

    ``replace`` is the only mutator and is called by the sync loop after a
    successful cycle.  Timestamps are kept strictly increasing across
    replacements even if the wall clock stalls or steps back.

    """

    __slots__ = ("_content", "_lock")

    def __init__(self, initial: RenderedContent | None = None) -> None:
        self._content = initial if initial is not None else RenderedContent()
        self._lock = ReadWriteLock()

    def get(self) -> RenderedContent:
        """Return the current snapshot."""
        with self._lock.read():
            return self._content

    def replace(self, content: RenderedContent) -> RenderedContent:
        """Swap in a new snapshot and return what was stored."""
        with self._lock.write():
            previous = self._content.rendered_at
            if content.rendered_at <= previous:
                content = replace(content, rendered_at=previous + timedelta(microseconds=1))
            self._content = content
            return content

    def last_update_label(self) -> str:
        """``Last updated: <long date>`` for display."""
        return f"Last updated: {format_long_date(self.get().rendered_at)}"
