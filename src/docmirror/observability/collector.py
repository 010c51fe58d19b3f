"""Sync collector: records sync, broadcast, and asset events.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe to call from the event loop and from ``asyncio.to_thread`` workers.

"""

from __future__ import annotations

from docmirror.observability.events import (
    AssetMaterialized,
    BroadcastSent,
    SyncCompleted,
    SyncFailed,
    now_ns,
)
from docmirror.observability.log import EventLog


class SyncCollector:
    """Event collector for the sync loop and its collaborators.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record_sync(
        self,
        doc_id: str,
        *,
        markup_bytes: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a successful sync cycle."""
        self._log.append(
            SyncCompleted(
                doc_id=doc_id,
                markup_bytes=markup_bytes,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_failure(
        self,
        doc_id: str,
        error: str,
        *,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a failed sync cycle."""
        self._log.append(
            SyncFailed(
                doc_id=doc_id,
                error=error,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_broadcast(self, message: str, *, delivered: int = 0, dropped: int = 0) -> None:
        self._log.append(
            BroadcastSent(
                message=message,
                delivered=delivered,
                dropped=dropped,
                timestamp_ns=now_ns(),
            )
        )

    def record_asset(self, path: str, *, size_bytes: int = 0) -> None:
        self._log.append(
            AssetMaterialized(path=path, size_bytes=size_bytes, timestamp_ns=now_ns())
        )
