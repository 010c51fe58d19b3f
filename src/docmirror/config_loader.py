"""Load MirrorConfig from the environment and docmirror.yaml if present.

Precedence, lowest first: defaults, environment variables, config file,
explicit keyword overrides (CLI).
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from docmirror._errors import ConfigError
from docmirror.config import MirrorConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

_FILE_KEYS = frozenset({
    "host", "port", "doc_id", "credentials_path", "update_interval",
    "keepalive_interval", "shutdown_grace", "static_dir", "templates_dir",
})

_DURATION_KEYS = frozenset({"update_interval", "keepalive_interval", "shutdown_grace"})

# Aliases used by the JSON config format
_JSON_ALIASES = {
    "google_cred_path": "credentials_path",
}

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str | float) -> float:
    """Parse a duration into seconds.

    Accepts plain numbers (seconds) and Go-style duration strings made of
    number+unit pairs: ``"1h"``, ``"1h30m"``, ``"250ms"``, ``"1.5s"``.

    Raises:
        ValueError: If the string is not a valid duration.

    """
    if isinstance(value, bool):
        msg = f"invalid duration: {value!r}"
        raise ValueError(msg)
    if isinstance(value, int | float):
        return float(value)

    text = value.strip()
    sign = 1.0
    if text[:1] in {"+", "-"}:
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        msg = f"invalid duration: {value!r}"
        raise ValueError(msg)

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            msg = f"invalid duration: {value!r}"
            raise ValueError(msg)
        number, unit = match.groups()
        total += float(number) * _UNIT_SECONDS[unit]
        pos = match.end()
    return sign * total


def parse_listen_addr(addr: str) -> tuple[str | None, int]:
    """Split ``host:port`` (or ``:port``) into its parts.

    An empty host yields ``None`` so the default bind address is kept.

    Raises:
        ValueError: If the port is missing or not a number.

    """
    host, sep, port = addr.rpartition(":")
    if not sep:
        msg = f"invalid listen address: {addr!r}"
        raise ValueError(msg)
    return (host or None), int(port)


def load_config(
    root: Path,
    *,
    environ: Mapping[str, str] | None = None,
    **overrides: object,
) -> MirrorConfig:
    """Load MirrorConfig for root, merging environment and file settings.

    Looks for docmirror.yaml, docmirror.yml, docmirror.toml, or config.json in
    root.  Overrides whose value is ``None`` are ignored so CLI flags that were
    not given do not mask file settings.

    Raises:
        ConfigError: If the config file is malformed or holds invalid values.

    """
    env_config = _read_environment(os.environ if environ is None else environ)
    file_config = _read_config_file(root)
    explicit = {k: v for k, v in overrides.items() if v is not None}
    merged = {**env_config, **file_config, **explicit}

    for key in _DURATION_KEYS & merged.keys():
        try:
            merged[key] = parse_duration(merged[key])  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            msg = f"{key}: {exc}"
            raise ConfigError(msg) from exc

    try:
        return MirrorConfig(root=root, **merged)  # type: ignore[arg-type]
    except TypeError as exc:
        msg = f"Invalid configuration for {root}: {exc}"
        raise ConfigError(msg) from exc


def _read_environment(environ: Mapping[str, str]) -> dict[str, object]:
    """Read settings from environment variables.

    An unparseable ``UPDATE_INTERVAL`` is ignored and the default kept.
    """
    result: dict[str, object] = {}

    if addr := environ.get("LISTEN_ADDR"):
        try:
            host, port = parse_listen_addr(addr)
        except ValueError as exc:
            msg = f"LISTEN_ADDR: {exc}"
            raise ConfigError(msg) from exc
        if host is not None:
            result["host"] = host
        result["port"] = port

    if interval := environ.get("UPDATE_INTERVAL"):
        try:
            result["update_interval"] = parse_duration(interval)
        except ValueError:
            pass

    if doc_id := environ.get("GOOGLE_DOC_ID"):
        result["doc_id"] = doc_id

    if cred_path := environ.get("GOOGLE_CRED_PATH"):
        result["credentials_path"] = cred_path

    return result


def _read_config_file(root: Path) -> dict[str, object]:
    """Read docmirror config from yaml/toml/json if present. Returns empty dict otherwise."""
    for name in ("docmirror.yaml", "docmirror.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "docmirror.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    json_path = root / "config.json"
    if json_path.is_file():
        return _parse_json(json_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    import yaml

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_section(data, path)


def _parse_toml(path: Path) -> dict[str, object]:
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_section(data, path)


def _parse_json(path: Path) -> dict[str, object]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if isinstance(data, dict) and "listen_addr" in data:
        data = dict(data)
        try:
            host, port = parse_listen_addr(str(data.pop("listen_addr")))
        except ValueError as exc:
            msg = f"{path.name}: listen_addr: {exc}"
            raise ConfigError(msg) from exc
        if host is not None:
            data["host"] = host
        data["port"] = port
    return _flatten_section(data, path)


def _flatten_section(data: object, path: Path) -> dict[str, object]:
    """Extract docmirror.* keys and known top-level keys into config kwargs."""
    if not isinstance(data, dict):
        msg = f"{path.name}: expected a mapping at top level"
        raise ConfigError(msg)

    result: dict[str, object] = {}
    for k, v in data.items():
        key = _JSON_ALIASES.get(k, k)
        if key in _FILE_KEYS:
            result[key] = v
    section = data.get("docmirror")
    if isinstance(section, dict):
        for k, v in section.items():
            key = _JSON_ALIASES.get(k, k)
            if key in _FILE_KEYS:
                result[key] = v
    return result
