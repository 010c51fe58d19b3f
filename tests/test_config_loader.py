"""Tests for docmirror.config_loader: environment, file, and override merging."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docmirror._errors import ConfigError
from docmirror.config_loader import load_config, parse_duration, parse_listen_addr


class TestParseDuration:
    """parse_duration: Go-style duration strings and plain numbers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1h", 3600.0),
            ("30m", 1800.0),
            ("1h30m", 5400.0),
            ("90s", 90.0),
            ("250ms", 0.25),
            ("1.5s", 1.5),
            ("0", 0.0),
            (45, 45.0),
            (2.5, 2.5),
        ],
    )
    def test_valid(self, value: str | float, expected: float) -> None:
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "1x", "h", "10", "1h 30m", "abc"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="invalid duration"):
            parse_duration(value)

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_duration(True)


class TestParseListenAddr:

    def test_host_and_port(self) -> None:
        assert parse_listen_addr("0.0.0.0:9000") == ("0.0.0.0", 9000)

    def test_port_only(self) -> None:
        assert parse_listen_addr(":8080") == (None, 8080)

    def test_missing_port(self) -> None:
        with pytest.raises(ValueError):
            parse_listen_addr("localhost")


class TestLoadConfig:
    """load_config: defaults < environment < file < overrides."""

    def test_defaults_without_env_or_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path, environ={})
        assert config.root == tmp_path
        assert config.port == 8080
        assert config.update_interval == 3600.0

    def test_environment(self, tmp_path: Path) -> None:
        env = {
            "LISTEN_ADDR": ":9090",
            "UPDATE_INTERVAL": "5m",
            "GOOGLE_DOC_ID": "doc-env",
            "GOOGLE_CRED_PATH": "keys/sa.json",
        }
        config = load_config(tmp_path, environ=env)
        assert config.host == "127.0.0.1"
        assert config.port == 9090
        assert config.update_interval == 300.0
        assert config.doc_id == "doc-env"
        assert config.credentials_file == tmp_path / "keys" / "sa.json"

    def test_invalid_env_interval_falls_back(self, tmp_path: Path) -> None:
        config = load_config(tmp_path, environ={"UPDATE_INTERVAL": "soon"})
        assert config.update_interval == 3600.0

    def test_invalid_listen_addr(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="LISTEN_ADDR"):
            load_config(tmp_path, environ={"LISTEN_ADDR": "nope"})

    def test_yaml_overrides_environment(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.yaml").write_text(
            "doc_id: doc-file\nupdate_interval: 10m\nport: 7000\n"
        )
        config = load_config(tmp_path, environ={"GOOGLE_DOC_ID": "doc-env"})
        assert config.doc_id == "doc-file"
        assert config.update_interval == 600.0
        assert config.port == 7000

    def test_yaml_nested_section(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.yml").write_text("docmirror:\n  doc_id: nested\n")
        config = load_config(tmp_path, environ={})
        assert config.doc_id == "nested"

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.yaml").write_text("doc_id: a\ntheme: dark\n")
        config = load_config(tmp_path, environ={})
        assert config.doc_id == "a"

    def test_toml(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.toml").write_text(
            '[docmirror]\ndoc_id = "doc-toml"\nkeepalive_interval = "15s"\n'
        )
        config = load_config(tmp_path, environ={})
        assert config.doc_id == "doc-toml"
        assert config.keepalive_interval == 15.0

    def test_json_config(self, tmp_path: Path) -> None:
        (tmp_path / "config.json").write_text(json.dumps({
            "listen_addr": "0.0.0.0:8000",
            "update_interval": "2h",
            "doc_id": "doc-json",
            "google_cred_path": "/secrets/sa.json",
        }))
        config = load_config(tmp_path, environ={})
        assert config.host == "0.0.0.0"
        assert config.port == 8000
        assert config.update_interval == 7200.0
        assert config.doc_id == "doc-json"
        assert config.credentials_file == Path("/secrets/sa.json")

    def test_overrides_win_and_none_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.yaml").write_text("doc_id: doc-file\nport: 7000\n")
        config = load_config(tmp_path, environ={}, doc_id="doc-cli", port=None)
        assert config.doc_id == "doc-cli"
        assert config.port == 7000

    def test_string_interval_override_parsed(self, tmp_path: Path) -> None:
        config = load_config(tmp_path, environ={}, update_interval="45s")
        assert config.update_interval == 45.0

    def test_invalid_file_duration_raises(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.yaml").write_text("update_interval: whenever\n")
        with pytest.raises(ConfigError, match="update_interval"):
            load_config(tmp_path, environ={})

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.yaml").write_text("doc_id: [unclosed\n")
        with pytest.raises(ConfigError, match="docmirror.yaml"):
            load_config(tmp_path, environ={})

    def test_non_mapping_file_raises(self, tmp_path: Path) -> None:
        (tmp_path / "docmirror.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(tmp_path, environ={})
