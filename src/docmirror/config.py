"""docmirror configuration.

MirrorConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

from docmirror._errors import ConfigError

# Heartbeat cadence bounds accepted by chirp's EventStream
KEEPALIVE_MIN = 1.0
KEEPALIVE_MAX = 300.0


@dataclass(frozen=True, slots=True)
class MirrorConfig:
    """Configuration for a docmirror application.

    Attributes:
        root: Path to the site root directory (contains static/, templates/,
              and the credentials file).  Always resolved to an absolute path
              on construction.
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
        doc_id: Identifier of the remote document to mirror.
        credentials_path: Service-account key for the fetch client.  Relative
            paths are resolved against ``root``.
        update_interval: Seconds between sync cycles.
        keepalive_interval: Seconds of SSE idleness before a heartbeat comment
            frame (1 to 300).
        shutdown_grace: Seconds an in-flight sync cycle may run after a stop
            request before it is abandoned.
        static_dir: Directory served under ``/static`` (images land in
            ``static_dir/images``).
        templates_dir: Directory containing user templates.  The bundled
            templates are used when it does not exist.

    """

    root: Path = field(default_factory=Path.cwd)
    host: str = "127.0.0.1"
    port: int = 8080
    doc_id: str = ""
    credentials_path: str = "credentials.json"
    update_interval: float = 3600.0
    keepalive_interval: float = 30.0
    shutdown_grace: float = 30.0
    static_dir: str = "static"
    templates_dir: str = "templates"

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if self.update_interval <= 0:
            msg = f"update_interval must be positive, got {self.update_interval!r}"
            raise ConfigError(msg)
        if not KEEPALIVE_MIN <= self.keepalive_interval <= KEEPALIVE_MAX:
            msg = (
                f"keepalive_interval must be between {KEEPALIVE_MIN:g} and "
                f"{KEEPALIVE_MAX:g} seconds, got {self.keepalive_interval!r}"
            )
            raise ConfigError(msg)
        if self.shutdown_grace < 0:
            msg = f"shutdown_grace must not be negative, got {self.shutdown_grace!r}"
            raise ConfigError(msg)

    @property
    def static_path(self) -> Path:
        """Absolute path to the static directory."""
        return self.root / self.static_dir

    @property
    def images_path(self) -> Path:
        """Absolute path to the materialized image directory."""
        return self.static_path / "images"

    @property
    def templates_path(self) -> Path:
        """Absolute path to the user templates directory."""
        return self.root / self.templates_dir

    @property
    def credentials_file(self) -> Path:
        """Absolute path to the credentials file."""
        path = Path(self.credentials_path)
        if path.is_absolute():
            return path
        return self.root / path
