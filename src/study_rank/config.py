"""Configuration file management for study-rank.

Reads and writes ~/.study-rank/config.json for settings that don't belong in
the data store (where the store lives, how chatty logging is). Study
preferences such as the daily goal are AppSettings and live in the store.
"""
from __future__ import annotations

import json
from pathlib import Path

DEFAULT_CONFIG_PATH: Path = Path.home() / ".study-rank" / "config.json"
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def get_db_path(config_path: Path | None = None) -> Path | None:
    """Return the configured database path, or None to use the default."""
    config = load_config(config_path)
    raw = config.get("db_path")
    if raw:
        return Path(raw).expanduser()
    return None


def set_db_path(db_path: Path, config_path: Path | None = None) -> None:
    """Persist the database path to config."""
    config = load_config(config_path)
    config["db_path"] = str(db_path)
    save_config(config, config_path)


def get_log_level(config_path: Path | None = None) -> str:
    """Return the configured log level name, falling back to WARNING."""
    config = load_config(config_path)
    level = str(config.get("log_level", DEFAULT_LOG_LEVEL)).upper()
    return level if level in _LOG_LEVELS else DEFAULT_LOG_LEVEL
