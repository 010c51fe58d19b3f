"""Startup banner: mode-aware status output.

Prints a startup banner with the mirrored document, poll cadence, and the
server URL.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docmirror.config import MirrorConfig


# ---------------------------------------------------------------------------
# ANSI helpers: respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def format_interval(seconds: float) -> str:
    """Render a poll interval compactly: ``1h``, ``1h30m``, ``45s``, ``250ms``."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return "".join(parts)


def print_banner(
    config: MirrorConfig,
    mode: str,
    *,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the docmirror startup banner to stderr.

    Args:
        config: Resolved MirrorConfig.
        mode: ``"serve"`` or ``"render"``.
        load_ms: Time spent wiring the app in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from docmirror import __version__

    lines: list[str] = [
        "",
        f"  {_BOLD}docmirror{_RESET} {_DIM}v{__version__}{_RESET}  {_GREEN}[{mode}]{_RESET}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} document: {config.doc_id}{timing}")
    lines.append(
        f"  {_DIM}├─{_RESET} sync every {format_interval(config.update_interval)}"
    )
    lines.append(f"  {_DIM}├─{_RESET} images: {_DIM}{config.images_path}{_RESET}")

    if mode == "serve":
        lines.append(
            f"  {_DIM}└─{_RESET} {_GREEN}live{_RESET}"
            f": SSE on {_DIM}/updates{_RESET}"
        )
        url = f"http://{config.host}:{config.port}"
        lines.append("")
        lines.append(f"  {_clickable_url(url)}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
