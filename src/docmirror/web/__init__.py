"""Web layer: Chirp routes for the cached render and the SSE update stream."""

from docmirror.web.middleware import htmx_middleware
from docmirror.web.router import MirrorRouter

__all__ = ["MirrorRouter", "htmx_middleware"]
