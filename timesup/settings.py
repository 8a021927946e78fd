"""Application settings with JSON persistence.

Settings are stored at:
    ~/.config/timesup/settings.json

Usage::

    settings = load_settings()
    settings.check_period_minutes = 10
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "timesup"
SETTINGS_PATH = CONFIG_DIR / "settings.json"


@dataclass
class Settings:
    """All operator-configurable preferences."""

    # ── scheduling ────────────────────────────────────────────────────
    ticks_per_second: int = 20
    check_period_minutes: int = 5          # reminder interval

    # ── host ──────────────────────────────────────────────────────────
    console_name: str = "CONSOLE"
    log_level: str = "INFO"


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**_drop_invalid(filtered, path))
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
    return Settings()


def _valid(key: str, value) -> bool:
    default = getattr(Settings(), key)
    if isinstance(default, int):
        # bool is an int subclass but never a sensible count
        return type(value) is int and value > 0
    return isinstance(value, str) and value.strip() != ""


def _drop_invalid(values: dict, path: Path) -> dict:
    """Keep only values the scheduler and host can use."""
    kept = {}
    for key, value in values.items():
        if _valid(key, value):
            kept[key] = value
        else:
            logger.warning(
                "Ignoring invalid %s=%r in %s, using default", key, value, path
            )
    return kept


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
