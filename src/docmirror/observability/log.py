"""Event log: bounded, thread-safe store of sync and broadcast events.

Keeps the most recent ``MirrorEvent`` objects in a ring buffer so the
stats endpoint and tests can ask what the sync loop has been doing.

Thread Safety:
    Every public method takes the internal ``threading.Lock``.  Appends come
    from the event loop and from ``asyncio.to_thread`` workers.

"""

import threading
from collections import Counter, deque
from typing import Any

from docmirror.observability.events import MirrorEvent


def _matches(
    event: MirrorEvent,
    event_type: type | None,
    since_ns: int,
    doc_id: str | None,
) -> bool:
    if event_type is not None and not isinstance(event, event_type):
        return False
    if since_ns and event.timestamp_ns < since_ns:
        return False
    return doc_id is None or getattr(event, "doc_id", None) == doc_id


class EventLog:
    """Ring buffer of events; the oldest entries fall off once full.

    Args:
        max_events: Capacity of the buffer.

    """

    __slots__ = ("_buffer", "_capacity", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._capacity = max_events
        self._buffer: deque[MirrorEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: MirrorEvent) -> None:
        with self._lock:
            self._buffer.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        doc_id: str | None = None,
        limit: int = 100,
    ) -> list[MirrorEvent]:
        """Return matching events, newest first.

        Args:
            event_type: Keep only instances of this event class.
            since_ns: Keep only events stamped at or after this monotonic time.
            doc_id: Keep only events about this document.  Events without a
                ``doc_id`` (broadcasts, assets) never match.
            limit: Stop after this many matches.

        """
        with self._lock:
            snapshot = list(self._buffer)

        found: list[MirrorEvent] = []
        for event in reversed(snapshot):
            if len(found) == limit:
                break
            if _matches(event, event_type, since_ns, doc_id):
                found.append(event)
        return found

    def latest(self, event_type: type) -> MirrorEvent | None:
        """Most recent event of event_type, or None."""
        matches = self.query(event_type=event_type, limit=1)
        return matches[0] if matches else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def stats(self) -> dict[str, Any]:
        """Counts by event class plus buffer occupancy."""
        with self._lock:
            snapshot = list(self._buffer)

        return {
            "total": len(snapshot),
            "max_events": self._capacity,
            "by_type": dict(Counter(type(event).__name__ for event in snapshot)),
        }
