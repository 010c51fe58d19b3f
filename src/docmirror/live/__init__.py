"""Live layer: content cache, subscriber registry, and the sync loop.

Connects remote document changes to browser notifications through the
cached render and lossy SSE broadcasting.
"""

from docmirror.live.broadcaster import (
    CONTENT_UPDATED,
    Broadcaster,
    Subscriber,
    error_event,
)
from docmirror.live.cache import ContentCache, RenderedContent, format_long_date
from docmirror.live.sync import SyncLoop

__all__ = [
    "CONTENT_UPDATED",
    "Broadcaster",
    "ContentCache",
    "RenderedContent",
    "Subscriber",
    "SyncLoop",
    "error_event",
    "format_long_date",
]
