"""Mirror router: serves the cached render and the live update stream.

Registers the page, fragment, last-update, SSE, health, and stats endpoints
on a Chirp app.  Handlers only read the content cache and the subscriber
registry; the sync loop is the only writer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from chirp import Request

from docmirror.live.cache import format_long_date

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chirp import App, SSEEvent

    from docmirror.live.broadcaster import Broadcaster
    from docmirror.live.cache import ContentCache
    from docmirror.observability.collector import SyncCollector

INDEX_TEMPLATE = "index.html"
DEFAULT_TITLE = "docmirror"

INDEX_ENDPOINT = "/"
CONTENT_ENDPOINT = "/content"
LAST_UPDATE_ENDPOINT = "/last-update"
UPDATES_ENDPOINT = "/updates"
HEALTH_ENDPOINT = "/health"
STATS_ENDPOINT = "/__docmirror/stats"


def _json_response(payload: object, status: int = 200) -> Any:
    from chirp.http.response import Response

    return Response(
        body=json.dumps(payload, indent=2),
        status=status,
        content_type="application/json",
    )


class MirrorRouter:
    """Routes the mirrored document through Chirp's request/response cycle.

    Args:
        app: Chirp App to register routes on (must not yet be frozen).
        cache: Content cache read by the page and fragment handlers.
        broadcaster: Subscriber registry for the SSE endpoint.
        keepalive: Seconds of SSE idleness before Chirp sends a heartbeat
            comment.

    """

    def __init__(
        self,
        app: App,
        cache: ContentCache,
        broadcaster: Broadcaster,
        *,
        keepalive: float = 30.0,
    ) -> None:
        self._app = app
        self._cache = cache
        self._broadcaster = broadcaster
        self._keepalive = keepalive
        self._collector: SyncCollector | None = None

    # ----- Handlers -----

    async def index(self, request: Request) -> Any:
        """Full page with the cached HTML, or a placeholder before the first sync."""
        from chirp import Template

        return Template(INDEX_TEMPLATE, **self.page_context())

    def page_context(self) -> dict[str, Any]:
        snapshot = self._cache.get()
        return {
            "title": snapshot.title or DEFAULT_TITLE,
            "content": snapshot.html,
            "last_update": format_long_date(snapshot.rendered_at),
            "has_content": not snapshot.is_empty,
        }

    async def content(self, request: Request) -> Any:
        """The cached HTML fragment."""
        from chirp.http.response import Response

        return Response(body=self._cache.get().html, status=200, content_type="text/html")

    async def last_update(self, request: Request) -> Any:
        return self._cache.last_update_label()

    async def health(self, request: Request) -> Any:
        return _json_response({
            "status": "ok",
            "subscribers": self._broadcaster.subscriber_count,
            "rendered": not self._cache.get().is_empty,
        })

    async def updates(self, request: Request) -> Any:
        """SSE stream of broadcast events; Chirp handles idle heartbeats."""
        from chirp import EventStream

        return EventStream(self.event_frames(), heartbeat_interval=self._keepalive)

    async def event_frames(self) -> AsyncIterator[SSEEvent]:
        """Unnamed ``data:`` frames for one connection's subscriber.

        The subscriber is registered when the stream starts and unregistered
        as soon as the stream is closed or cancelled.

        """
        from chirp import SSEEvent

        subscriber = self._broadcaster.register()
        inbox = self._broadcaster.client_generator(subscriber)
        try:
            async for message in inbox:
                yield SSEEvent(data=message)
        finally:
            await inbox.aclose()
            self._broadcaster.unregister(subscriber)

    async def stats(self, request: Request) -> Any:
        """Aggregate sync timings, the latest fetch error, and the event log summary."""
        from docmirror.observability.events import SyncFailed
        from docmirror.observability.profiler import compute_aggregate_stats

        collector = self._collector
        if collector is None:
            return _json_response({"error": "observability disabled"}, status=404)

        last_failure = collector.log.latest(SyncFailed)
        return _json_response({
            "sync": compute_aggregate_stats(collector.log),
            "last_error": last_failure.error if last_failure is not None else None,
            "event_log": collector.log.stats(),
        })

    # ----- Registration -----

    def register_pages(self) -> None:
        """Register ``/``, ``/content``, ``/last-update``, and ``/health``."""
        self._app.route(INDEX_ENDPOINT, name="docmirror:index")(self.index)
        self._app.route(CONTENT_ENDPOINT, name="docmirror:content")(self.content)
        self._app.route(LAST_UPDATE_ENDPOINT, name="docmirror:last-update")(self.last_update)
        self._app.route(HEALTH_ENDPOINT, name="docmirror:health")(self.health)

    def register_sse_endpoint(self) -> None:
        """Register the ``/updates`` SSE endpoint.

        Each connection owns one subscriber.  Events go out as unnamed
        ``data:`` frames; while idle, Chirp's ``EventStream`` sends heartbeat
        comments every ``keepalive`` seconds so proxies keep the connection
        open.

        """
        self._app.route(UPDATES_ENDPOINT, name="docmirror:updates")(self.updates)

    def register_stats_endpoint(self, collector: SyncCollector) -> None:
        """Register the ``/__docmirror/stats`` JSON endpoint."""
        self._collector = collector
        self._app.route(STATS_ENDPOINT, name="docmirror:stats")(self.stats)
