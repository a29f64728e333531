"""Tests for config persistence."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from chart_stream import config

_REAL_GET_CONFIG_DIR = config.get_config_dir


def test_load_defaults_when_missing() -> None:
    assert config.load_config() == config.AppConfig()


def test_load_defaults_when_corrupt(isolated_config_dir: Path) -> None:
    (isolated_config_dir / "config.json").write_text("{not-json", encoding="utf-8")
    assert config.load_config() == config.AppConfig()


def test_load_defaults_when_not_an_object(isolated_config_dir: Path) -> None:
    (isolated_config_dir / "config.json").write_text("[1, 2]", encoding="utf-8")
    assert config.load_config() == config.AppConfig()


def test_save_load_round_trip() -> None:
    original = config.AppConfig(
        last_open_path="/tmp/stream.ndjson",
        min_delay_ms=10,
        max_delay_ms=20,
        show_invalid=True,
        autoplay=False,
    )
    config.save_config(original)
    assert config.load_config() == original


def test_save_config_atomic_write(monkeypatch: pytest.MonkeyPatch) -> None:
    replaced: list[tuple[Path, Path]] = []

    def fake_replace(src: Path, dest: Path) -> None:
        replaced.append((src, dest))
        data = json.loads(src.read_text(encoding="utf-8"))
        assert data["min_delay_ms"] == 50
        dest.write_text(json.dumps(data), encoding="utf-8")

    monkeypatch.setattr(config.os, "replace", fake_replace)
    config.save_config(config.AppConfig())
    src, dest = replaced[0]
    assert src.suffix == ".tmp"
    assert dest.name == "config.json"


def test_config_from_mapping_sanitizes_values() -> None:
    cfg = config._config_from_mapping(
        {
            "last_open_path": 123,
            "min_delay_ms": "fast",
            "max_delay_ms": True,
            "show_invalid": "yes",
            "autoplay": None,
        }
    )
    assert cfg == config.AppConfig()


def test_config_from_mapping_clamps_delays() -> None:
    cfg = config._config_from_mapping({"min_delay_ms": -4, "max_delay_ms": 99_999})
    assert cfg.min_delay_ms == 0
    assert cfg.max_delay_ms == config.MAX_DELAY_LIMIT_MS
    cfg = config._config_from_mapping({"min_delay_ms": 300, "max_delay_ms": 100})
    assert (cfg.min_delay_ms, cfg.max_delay_ms) == (300, 300)


def test_get_config_dir_os_defaults(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    if os.name == "nt":
        monkeypatch.setenv("APPDATA", str(tmp_path))
        assert _REAL_GET_CONFIG_DIR("charts") == tmp_path / "charts"
    else:
        monkeypatch.setattr(config, "_is_macos", lambda: False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        path = _REAL_GET_CONFIG_DIR("charts")
        assert path == tmp_path / "xdg" / "charts"
        assert path.is_dir()
