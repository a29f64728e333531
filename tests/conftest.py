"""Pytest configuration for Chart Stream."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest

from chart_stream import config


@pytest.fixture(autouse=True)
def isolated_config_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setattr(config, "get_config_dir", lambda: config_dir)
    return config_dir


@pytest.fixture
def write_event_log(tmp_path: Path) -> Callable[..., Path]:
    """Write token deltas as an NDJSON event log and return its path."""

    def _write(
        deltas: Iterable[str],
        *,
        finish: Optional[str] = "done",
        name: str = "stream.ndjson",
    ) -> Path:
        lines = [
            json.dumps({"event": "token", "data": {"delta": delta}})
            for delta in deltas
        ]
        if finish == "done":
            lines.append(json.dumps({"event": "done", "data": {}}))
        elif finish is not None:
            lines.append(json.dumps({"event": "error", "data": {"message": finish}}))
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write

