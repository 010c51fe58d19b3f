"""Sync loop: keeps the content cache current and notifies subscribers.

One asyncio task drives the loop:

    1. Eager first cycle as soon as the loop starts
    2. One cycle per tick of a fixed interval; cycles never overlap
    3. Each cycle: fetch -> convert -> render -> cache replace -> broadcast

A failed fetch broadcasts ``error:<message>`` and leaves the cache alone, so
viewers keep the last good render.  There are no retries inside a cycle;
the next tick is the retry.  Blocking work (the remote fetch, image writes,
HTML rendering) runs in worker threads via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from docmirror._errors import SyncError
from docmirror.document.converter import convert
from docmirror.live.broadcaster import CONTENT_UPDATED, error_event
from docmirror.live.cache import RenderedContent

if TYPE_CHECKING:
    from docmirror._types import DocumentID, SyncState
    from docmirror.document.converter import Materializer
    from docmirror.document.fetcher import DocumentFetcher
    from docmirror.live.broadcaster import Broadcaster
    from docmirror.live.cache import ContentCache
    from docmirror.observability.collector import SyncCollector
    from docmirror.observability.profiler import SyncProfiler

type Renderer = Callable[[str], str]


def markdown_renderer() -> Renderer:
    """Return a patitas markdown-to-HTML renderer."""
    from patitas import Markdown

    return Markdown(plugins=["table"])


class SyncLoop:
    """Timer-driven controller for fetch/convert/cache/broadcast cycles.

    Args:
        fetcher: Fetch collaborator returning a ``StructuredDocument``.
        cache: Content cache to replace on success.
        broadcaster: Subscriber registry to notify after every cycle.
        doc_id: Document to mirror.
        interval: Seconds between ticks.
        materializer: Persists embedded data-URI images during conversion.
        render: Markdown-to-HTML renderer (patitas by default).
        collector: Optional collector for sync events and stage timings.
        shutdown_grace: Default seconds ``stop()`` lets an in-flight cycle run.

    """

    def __init__(
        self,
        fetcher: DocumentFetcher,
        cache: ContentCache,
        broadcaster: Broadcaster,
        *,
        doc_id: DocumentID,
        interval: float,
        materializer: Materializer | None = None,
        render: Renderer | None = None,
        collector: SyncCollector | None = None,
        shutdown_grace: float = 30.0,
    ) -> None:
        if interval <= 0:
            msg = f"interval must be positive, got {interval!r}"
            raise SyncError(msg)
        self._fetcher = fetcher
        self._cache = cache
        self._broadcaster = broadcaster
        self._doc_id = doc_id
        self._interval = interval
        self._materializer = materializer
        self._render = render
        self._collector = collector
        self._shutdown_grace = shutdown_grace

        self._state: SyncState = "idle"
        self._cycle_lock = asyncio.Lock()
        self._stopping = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._cycles = 0

        self._profiler: SyncProfiler | None = None
        if collector is not None:
            from docmirror.observability.profiler import SyncProfiler

            self._profiler = SyncProfiler(collector.log)

    @property
    def state(self) -> SyncState:
        """``"idle"`` between cycles, ``"syncing"`` while one runs."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Whether the driver task is active."""
        return self._task is not None and not self._task.done()

    @property
    def cycles(self) -> int:
        """Number of completed cycles, successful or not."""
        return self._cycles

    # ----- Lifecycle -----

    def start(self) -> asyncio.Task[None]:
        """Spawn the driver task on the running event loop.

        Raises:
            SyncError: If the loop is already running.

        """
        if self.is_running:
            msg = "sync loop already running"
            raise SyncError(msg)
        self._stopping = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="docmirror-sync",
        )
        return self._task

    async def stop(self, grace: float | None = None) -> None:
        """Stop the loop, letting an in-flight cycle finish within grace seconds.

        A cycle still running after the grace period is cancelled.  Safe to
        call when the loop is not running.

        """
        task = self._task
        if task is None:
            return
        self._stopping.set()
        timeout = self._shutdown_grace if grace is None else grace
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except TimeoutError:
            print(
                f"  Sync cycle still running after {timeout:.0f}s, abandoning",
                file=sys.stderr,
            )
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        finally:
            self._task = None

    async def _run(self) -> None:
        """Driver: eager first cycle, then one cycle per tick until stopped."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval

        await self._guarded_cycle()

        while not self._stopping.is_set():
            delay = next_tick - loop.time()
            if delay > 0:
                try:
                    await asyncio.wait_for(self._stopping.wait(), timeout=delay)
                except TimeoutError:
                    pass
                else:
                    break

            await self._guarded_cycle()

            # A cycle that overran its tick gets one immediate follow-up;
            # any further missed ticks are dropped.
            next_tick += self._interval
            now = loop.time()
            if next_tick < now:
                next_tick = now

    async def _guarded_cycle(self) -> None:
        try:
            await self.sync_once()
        except Exception as exc:
            print(f"  Sync loop error: {exc}", file=sys.stderr)

    # ----- Cycle -----

    async def sync_once(self) -> bool:
        """Run one fetch/convert/cache/broadcast cycle.

        Cycles are serialized: a call made while another cycle is running
        waits for it to complete first.

        Returns:
            True if the cache was replaced, False if the fetch failed.

        """
        async with self._cycle_lock:
            self._state = "syncing"
            try:
                return await self._cycle()
            finally:
                self._state = "idle"
                self._cycles += 1

    def _stage(self, name: str) -> contextlib.AbstractContextManager[None]:
        if self._profiler is None:
            return contextlib.nullcontext()
        return self._profiler.stage(name)

    async def _cycle(self) -> bool:
        t0 = time.perf_counter()
        if self._profiler is not None:
            self._profiler.begin(self._doc_id)

        try:
            with self._stage("fetch"):
                doc = await asyncio.to_thread(self._fetcher.fetch, self._doc_id)
        except Exception as exc:
            self._fail(exc, t0)
            return False

        with self._stage("convert"):
            markup = await asyncio.to_thread(convert, doc, self._materializer)
        with self._stage("render"):
            html = await asyncio.to_thread(self._render_html, markup)

        self._cache.replace(
            RenderedContent(
                markup=markup,
                html=html,
                rendered_at=datetime.now(UTC),
                title=doc.title,
            )
        )

        with self._stage("broadcast"):
            self._broadcaster.broadcast(CONTENT_UPDATED)

        if self._collector is not None:
            self._collector.record_sync(
                self._doc_id,
                markup_bytes=len(markup.encode("utf-8")),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        if self._profiler is not None:
            self._profiler.finish()
        return True

    def _fail(self, exc: BaseException, t0: float) -> None:
        message = str(exc)
        print(f"  Sync error: {self._doc_id}: {message}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_failure(
                self._doc_id,
                message,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        self._broadcaster.broadcast(error_event(message))

    def _render_html(self, markup: str) -> str:
        if self._render is None:
            self._render = markdown_renderer()
        return self._render(markup)
