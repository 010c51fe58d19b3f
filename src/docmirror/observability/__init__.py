"""Sync observability: a bounded event log of sync, broadcast, and asset events.

Quick Start:
    >>> from docmirror.observability import EventLog, SyncCollector
    >>> log = EventLog()
    >>> collector = SyncCollector(log)
    >>> collector.record_failure("doc-1", "timeout")
    >>> len(log)
    1

"""

from docmirror.observability.collector import SyncCollector
from docmirror.observability.events import (
    AssetMaterialized,
    BroadcastSent,
    MirrorEvent,
    SyncCompleted,
    SyncFailed,
    SyncProfile,
    now_ns,
)
from docmirror.observability.log import EventLog
from docmirror.observability.profiler import SyncProfiler, compute_aggregate_stats

__all__ = [
    "AssetMaterialized",
    "BroadcastSent",
    "EventLog",
    "MirrorEvent",
    "SyncCollector",
    "SyncCompleted",
    "SyncFailed",
    "SyncProfile",
    "SyncProfiler",
    "compute_aggregate_stats",
    "now_ns",
]
