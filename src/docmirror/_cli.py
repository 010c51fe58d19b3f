"""docmirror CLI: docmirror serve / docmirror render.

Entry point for the ``docmirror`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the docmirror CLI."""
    parser = argparse.ArgumentParser(
        prog="docmirror",
        description="Mirror a remote document as markdown with live browser updates.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # docmirror serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Mirror the document and serve it with live updates",
    )
    serve_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument("--doc-id", default=None, help="Document to mirror")
    serve_parser.add_argument(
        "--interval", default=None, help="Poll interval (e.g. 30s, 5m, 1h)",
    )
    serve_parser.add_argument(
        "--credentials", default=None, help="Service-account credentials file",
    )

    # docmirror render
    render_parser = subparsers.add_parser(
        "render",
        help="Fetch the document once and print its markdown",
    )
    render_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    render_parser.add_argument("--doc-id", default=None, help="Document to render")
    render_parser.add_argument(
        "--credentials", default=None, help="Service-account credentials file",
    )

    return parser


def _get_version() -> str:
    from docmirror import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from docmirror._errors import DocMirrorError
    from docmirror.app import print_error, render, serve

    try:
        if args.command == "serve":
            serve(
                root=args.root,
                host=args.host,
                port=args.port,
                doc_id=args.doc_id,
                update_interval=args.interval,
                credentials_path=args.credentials,
            )
        elif args.command == "render":
            markup = render(
                root=args.root,
                doc_id=args.doc_id,
                credentials_path=args.credentials,
            )
            sys.stdout.write(markup)
    except DocMirrorError as exc:
        print_error(exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
