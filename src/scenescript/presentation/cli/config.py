"""CLI configuration helpers for analyzer settings persistence."""
from __future__ import annotations

import json
import os
from dataclasses import asdict, fields
from pathlib import Path

from scenescript.services.flow_analyzer import AnalyzerConfig


def debug_enabled() -> bool:
    """Return True only when SCENESCRIPT_DEBUG is explicitly set to '1'."""
    return os.getenv("SCENESCRIPT_DEBUG") == "1"


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "SceneScript"
        return Path.home() / "SceneScript"
    return Path.home() / ".config" / "scenescript"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def get_save_dir() -> Path:
    """Return the per-user save directory."""
    return get_user_data_dir() / "saves"


def _normalize_field(value: object, default: object) -> object:
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(default, int):
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        return default
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
            return float(value)
        return default
    return default


def load_analyzer_config(path: Path | None = None) -> AnalyzerConfig:
    """Load analyzer settings from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AnalyzerConfig()
    if not isinstance(raw, dict):
        return AnalyzerConfig()
    defaults = AnalyzerConfig()
    values = {
        field.name: _normalize_field(raw.get(field.name), getattr(defaults, field.name))
        for field in fields(AnalyzerConfig)
    }
    return AnalyzerConfig(**values)


def save_analyzer_config(config: AnalyzerConfig, path: Path | None = None) -> None:
    """Persist analyzer settings to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(asdict(config), indent=2, sort_keys=True), encoding="utf-8")
