"""Sync profiler: per-stage latency of successful sync cycles.

A cycle is timed in four stages (fetch, convert, render, broadcast).  When
the cycle completes, a ``SyncProfile`` event lands in the ``EventLog`` and,
when verbose, a one-line summary is written to stderr.

Thread Safety:
    One profiler belongs to one sync loop, and cycles never overlap, so a
    profiler has a single writer.  Aggregation reads go through the
    ``EventLog`` lock.

"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from docmirror.observability.events import SyncProfile, now_ns

if TYPE_CHECKING:
    from collections.abc import Iterator

    from docmirror.observability.log import EventLog

STAGES = ("fetch", "convert", "render", "broadcast")


class SyncProfiler:
    """Stage timer for one sync cycle at a time.

    Usage::

        profiler = SyncProfiler(event_log)

        profiler.begin(doc_id)
        with profiler.stage("fetch"):
            doc = fetch()
        ...
        profiler.finish()

    Stages that never ran report ``0.0``.  Unknown stage names are timed but
    not reported.

    """

    __slots__ = ("_cycle_start", "_doc_id", "_log", "_stage_ms", "_verbose")

    def __init__(self, log: EventLog, *, verbose: bool = True) -> None:
        self._log = log
        self._verbose = verbose
        self._doc_id = ""
        self._cycle_start: float | None = None
        self._stage_ms: dict[str, float] = dict.fromkeys(STAGES, 0.0)

    def begin(self, doc_id: str) -> None:
        """Reset stage timings and start the cycle clock."""
        self._doc_id = doc_id
        self._cycle_start = time.perf_counter()
        self._stage_ms = dict.fromkeys(STAGES, 0.0)

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time the enclosed block as stage name (also when it raises)."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._stage_ms[name] = (time.perf_counter() - t0) * 1000

    def elapsed_ms(self) -> float:
        """Milliseconds since ``begin()``; 0.0 before the first cycle."""
        if self._cycle_start is None:
            return 0.0
        return (time.perf_counter() - self._cycle_start) * 1000

    def finish(self) -> SyncProfile:
        """Emit and return the ``SyncProfile`` for the current cycle."""
        profile = SyncProfile(
            doc_id=self._doc_id,
            fetch_ms=self._stage_ms["fetch"],
            convert_ms=self._stage_ms["convert"],
            render_ms=self._stage_ms["render"],
            broadcast_ms=self._stage_ms["broadcast"],
            total_ms=self.elapsed_ms(),
            timestamp_ns=now_ns(),
        )
        self._log.append(profile)
        if self._verbose:
            breakdown = ", ".join(
                f"{name}: {getattr(profile, f'{name}_ms'):.0f}ms" for name in STAGES
            )
            print(
                f"  [{profile.total_ms:.0f}ms] synced {profile.doc_id} ({breakdown})",
                file=sys.stderr,
            )
        return profile


def _nearest_rank(ordered: list[float], pct: int) -> float:
    return ordered[min(len(ordered) * pct // 100, len(ordered) - 1)]


def compute_aggregate_stats(log: EventLog, *, limit: int = 100) -> dict[str, Any]:
    """Summarize the last limit ``SyncProfile`` events.

    Returns ``{"count": 0}`` when nothing has been profiled yet, otherwise
    total-time percentiles (p50/p95/p99, min, max) and per-stage means.

    """
    profiles = log.query(event_type=SyncProfile, limit=limit)
    if not profiles:
        return {"count": 0}

    totals = sorted(p.total_ms for p in profiles)
    count = len(totals)
    total_ms = {f"p{pct}": round(_nearest_rank(totals, pct), 1) for pct in (50, 95, 99)}
    total_ms["min"] = round(totals[0], 1)
    total_ms["max"] = round(totals[-1], 1)

    return {
        "count": count,
        "total_ms": total_ms,
        "avg_by_stage_ms": {
            name: round(sum(getattr(p, f"{name}_ms") for p in profiles) / count, 1)
            for name in STAGES
        },
    }
