"""docmirror: mirror a remote document as markdown with live browser updates.

Periodically fetches a Google Docs document, converts it to markdown
(images materialized into content-addressed files), renders it to HTML, and
notifies every open browser over Server-Sent Events.

Quick start::

    import docmirror

    docmirror.serve("my-site/", doc_id="1AbC...")

Two modes::

    docmirror.serve("my-site/")    # Live server with SSE updates
    docmirror.render("my-site/")   # One-shot fetch, returns markdown

"""

__version__ = "0.1.0"
__all__ = [
    "MirrorConfig",
    "__version__",
    "create_app",
    "render",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import docmirror`` fast; Chirp and patitas load on first use.
    """
    if name == "MirrorConfig":
        from docmirror.config import MirrorConfig

        return MirrorConfig

    if name == "create_app":
        from docmirror.app import create_app

        return create_app

    if name == "render":
        from docmirror.app import render

        return render

    if name == "serve":
        from docmirror.app import serve

        return serve

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
