"""docmirror application: wires the sync engine into a Chirp app.

``create_app`` builds every collaborator (cache, broadcaster, materializer,
sync loop, router) around a Chirp App whose startup hook starts the sync
loop and whose shutdown hook stops it.  ``serve`` and ``render`` are the
primary entry points.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from docmirror._errors import ConfigError
from docmirror.config import MirrorConfig
from docmirror.config_loader import load_config

if TYPE_CHECKING:
    from chirp import App

    from docmirror.document.fetcher import DocumentFetcher
    from docmirror.live.broadcaster import Broadcaster
    from docmirror.live.cache import ContentCache
    from docmirror.live.sync import SyncLoop
    from docmirror.observability.collector import SyncCollector


@dataclass(slots=True)
class MirrorApp:
    """A wired docmirror application.

    Attributes:
        app: The Chirp App serving the routes.
        config: Resolved configuration.
        cache: Content cache shared by the sync loop and the handlers.
        broadcaster: Subscriber registry for SSE connections.
        sync_loop: The timer-driven sync controller.
        collector: Observability collector.

    """

    app: App
    config: MirrorConfig
    cache: ContentCache
    broadcaster: Broadcaster
    sync_loop: SyncLoop
    collector: SyncCollector


def _bundled_templates_path() -> Path:
    return Path(__file__).parent / "templates"


def resolve_template_dir(config: MirrorConfig) -> Path:
    """User templates when they provide ``index.html``, else the bundled ones."""
    if (config.templates_path / "index.html").is_file():
        return config.templates_path
    return _bundled_templates_path()


def _create_chirp_app(config: MirrorConfig, *, debug: bool = False) -> App:
    from chirp import App, AppConfig

    app_config = AppConfig(
        template_dir=resolve_template_dir(config),
        debug=debug,
        host=config.host,
        port=config.port,
        sse_heartbeat_interval=config.keepalive_interval,
    )
    return App(config=app_config)


def _mount_static_files(app: App, config: MirrorConfig) -> None:
    """Serve the static directory (materialized images included) under ``/static``."""
    from chirp.middleware import StaticFiles

    config.images_path.mkdir(parents=True, exist_ok=True)
    app.add_middleware(StaticFiles(directory=config.static_path, prefix="/static"))


def _wire_sync_lifecycle(app: App, sync_loop: SyncLoop, config: MirrorConfig) -> None:
    """Start the sync loop with the app and stop it on shutdown.

    Flow:
        on_startup  -> spawn the sync task (eager first cycle)
        on_shutdown -> let an in-flight cycle finish within shutdown_grace
    """

    @app.on_startup
    async def _start_sync() -> None:
        sync_loop.start()

    @app.on_shutdown
    async def _stop_sync() -> None:
        await sync_loop.stop(config.shutdown_grace)


def default_fetcher(config: MirrorConfig) -> DocumentFetcher:
    """Google Docs fetcher authenticated with the configured credentials file."""
    from docmirror.document.fetcher import GoogleDocsFetcher

    return GoogleDocsFetcher(config.credentials_file)


def create_app(
    config: MirrorConfig,
    *,
    fetcher: DocumentFetcher | None = None,
    debug: bool = False,
) -> MirrorApp:
    """Build a fully wired docmirror application.

    Args:
        config: Resolved configuration.
        fetcher: Fetch collaborator; the Google Docs fetcher when None.
        debug: Run Chirp in debug mode.

    """
    from docmirror.document.assets import AssetMaterializer
    from docmirror.live.broadcaster import Broadcaster
    from docmirror.live.cache import ContentCache
    from docmirror.live.sync import SyncLoop
    from docmirror.observability import EventLog, SyncCollector
    from docmirror.web import MirrorRouter, htmx_middleware

    collector = SyncCollector(EventLog())
    cache = ContentCache()
    broadcaster = Broadcaster(collector=collector)
    sync_loop = SyncLoop(
        fetcher if fetcher is not None else default_fetcher(config),
        cache,
        broadcaster,
        doc_id=config.doc_id,
        interval=config.update_interval,
        materializer=AssetMaterializer(config.images_path, collector=collector),
        collector=collector,
        shutdown_grace=config.shutdown_grace,
    )

    app = _create_chirp_app(config, debug=debug)
    router = MirrorRouter(app, cache, broadcaster, keepalive=config.keepalive_interval)
    router.register_pages()
    router.register_sse_endpoint()
    router.register_stats_endpoint(collector)

    app.add_middleware(htmx_middleware)
    _mount_static_files(app, config)
    _wire_sync_lifecycle(app, sync_loop, config)

    return MirrorApp(
        app=app,
        config=config,
        cache=cache,
        broadcaster=broadcaster,
        sync_loop=sync_loop,
        collector=collector,
    )


def _require_doc_id(config: MirrorConfig) -> None:
    if not config.doc_id:
        msg = "No document id configured (set GOOGLE_DOC_ID, doc_id in docmirror.yaml, or --doc-id)"
        raise ConfigError(msg)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Mirror the configured document and serve it with live updates.

    Args:
        root: Path to the site root directory.
        **kwargs: Override MirrorConfig fields.

    """
    from docmirror.banner import print_banner

    config = load_config(Path(root), **kwargs)
    _require_doc_id(config)
    t0 = time.perf_counter()

    mirror = create_app(config)

    load_ms = (time.perf_counter() - t0) * 1000
    print_banner(config, mode="serve", load_ms=load_ms)

    mirror.app.run(host=config.host, port=config.port)


def render(
    root: str | Path = ".",
    *,
    fetcher: DocumentFetcher | None = None,
    **kwargs: object,
) -> str:
    """Fetch and convert the configured document once, returning the markdown.

    Embedded images are materialized into the static images directory.

    Raises:
        ConfigError: If no document id is configured.
        FetchError: If the document cannot be fetched.

    """
    from docmirror.document.assets import AssetMaterializer
    from docmirror.document.converter import convert

    config = load_config(Path(root), **kwargs)
    _require_doc_id(config)

    if fetcher is None:
        fetcher = default_fetcher(config)
    doc = fetcher.fetch(config.doc_id)
    return convert(doc, AssetMaterializer(config.images_path))


def print_error(exc: BaseException) -> None:
    """Print a one-line error to stderr."""
    print(f"  Error: {exc}", file=sys.stderr)
