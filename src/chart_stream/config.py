"""Configuration persistence for Chart Stream."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

MAX_DELAY_LIMIT_MS = 10_000


@dataclass(frozen=True)
class AppConfig:
    """Immutable user configuration loaded from disk."""

    last_open_path: Optional[str] = None
    min_delay_ms: int = 50
    max_delay_ms: int = 150
    show_invalid: bool = False
    autoplay: bool = True


def get_config_dir(app_name: str = "chart-stream") -> Path:
    """Return the per-user config directory for the current platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Roaming"
        return _ensure_dir(root / app_name)
    if _is_macos():
        return _ensure_dir(Path.home() / "Library" / "Application Support" / app_name)
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return _ensure_dir(root / app_name)


def get_config_path() -> Path:
    """Return the full config file path."""
    return get_config_dir() / "config.json"


def load_config() -> AppConfig:
    """Load configuration from disk, falling back to defaults on error."""
    path = get_config_path()
    if not path.exists():
        return AppConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to load config from %s", path)
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()
    return _config_from_mapping(raw)


def save_config(cfg: AppConfig) -> None:
    """Persist configuration to disk atomically."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(".tmp")
    temp_path.write_text(json.dumps(asdict(cfg), indent=2), encoding="utf-8")
    os.replace(temp_path, path)


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _is_macos() -> bool:
    return os.uname().sysname == "Darwin" if hasattr(os, "uname") else False


def _get_bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key, default)
    return value if isinstance(value, bool) else default


def _get_int(
    raw: dict[str, Any],
    key: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Fetch an integer value with optional clamping."""
    value = raw.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        value = default
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value


def _config_from_mapping(raw: dict[str, Any]) -> AppConfig:
    """Normalize raw JSON data into an AppConfig."""
    last_open_path = raw.get("last_open_path")
    if last_open_path is not None and not isinstance(last_open_path, str):
        last_open_path = None
    min_delay = _get_int(
        raw, "min_delay_ms", 50, min_value=0, max_value=MAX_DELAY_LIMIT_MS
    )
    max_delay = _get_int(
        raw, "max_delay_ms", 150, min_value=min_delay, max_value=MAX_DELAY_LIMIT_MS
    )
    return AppConfig(
        last_open_path=last_open_path,
        min_delay_ms=min_delay,
        max_delay_ms=max_delay,
        show_invalid=_get_bool(raw, "show_invalid", False),
        autoplay=_get_bool(raw, "autoplay", True),
    )
