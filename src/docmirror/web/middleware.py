"""htmx response middleware.

Adds ``Vary: HX-Request`` to every response so caches keep full pages and
htmx fragments apart, and echoes the ``HX-Trigger`` request header back so
client-side triggers fire after swaps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chirp.http.request import Request
    from chirp.http.response import Response, SSEResponse, StreamingResponse
    from chirp.middleware.protocol import Next

    type AnyResponse = Response | StreamingResponse | SSEResponse


async def htmx_middleware(request: Request, next: Next) -> AnyResponse:
    """Chirp middleware that sets the htmx caching and trigger headers.

    Streaming responses (the SSE endpoint) are passed through untouched.

    """
    response = await next(request)

    if not hasattr(response, "with_header"):
        return response

    response = response.with_header("Vary", "HX-Request")
    trigger = request.headers.get("HX-Trigger")
    if trigger:
        response = response.with_header("HX-Trigger", trigger)
    return response
