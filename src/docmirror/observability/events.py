"""Event model for sync and broadcast observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Sync loop events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SyncCompleted:
    """A sync cycle fetched, converted, and cached the document.

    Attributes:
        doc_id: Document that was synced.
        markup_bytes: Size of the converted markdown (UTF-8 bytes).
        duration_ms: Wall time of the whole cycle.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    doc_id: str
    markup_bytes: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SyncFailed:
    """A sync cycle failed to fetch the document; the cache was left alone.

    Attributes:
        doc_id: Document that was requested.
        error: Stringified fetch error (the broadcast message body).
        duration_ms: Wall time until the failure.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    doc_id: str
    error: str
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Broadcast and asset events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BroadcastSent:
    """An event was offered to every subscriber.

    Attributes:
        message: The event string.
        delivered: Subscribers whose inbox accepted it.
        dropped: Subscribers skipped because their inbox was full.

    """

    message: str
    delivered: int
    dropped: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class AssetMaterialized:
    """An embedded image was written to the images directory."""

    path: str
    size_bytes: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SyncProfile:
    """Per-stage timing of one successful sync cycle.

    Attributes:
        doc_id: Document that was synced.
        fetch_ms: Remote fetch.
        convert_ms: Document-to-markdown conversion (includes image writes).
        render_ms: Markdown-to-HTML rendering.
        broadcast_ms: Fan-out to subscribers.
        total_ms: Whole cycle.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    doc_id: str
    fetch_ms: float
    convert_ms: float
    render_ms: float
    broadcast_ms: float
    total_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type MirrorEvent = (
    SyncCompleted
    | SyncFailed
    | BroadcastSent
    | AssetMaterialized
    | SyncProfile
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
