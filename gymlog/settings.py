"""Session engine settings stored as ordered ``key``/``value``/``type`` items.

Only the keys in :data:`DEFAULT_SETTINGS` exist. Values read from the file
are converted to the declared type; a value that cannot be converted falls
back to its default.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from gymlog import (
    DEFAULT_RECOVERY_SECONDS,
    PAIRING_WINDOW_SECONDS,
    RECOVERY_EXTEND_SECONDS,
)
from gymlog.utils import parse_flag

SETTINGS_PATH = Path(__file__).resolve().parents[1] / "data" / "settings.json"

DEFAULT_SETTINGS = [
    {"key": "recovery_seconds", "value": DEFAULT_RECOVERY_SECONDS, "type": "int"},
    {"key": "recovery_extend_seconds", "value": RECOVERY_EXTEND_SECONDS, "type": "int"},
    {"key": "pairing_window_seconds", "value": PAIRING_WINDOW_SECONDS, "type": "int"},
    {"key": "link_supersets", "value": False, "type": "bool"},
]

_DEFAULTS = {item["key"]: item for item in DEFAULT_SETTINGS}

_cache: list[dict] | None = None


def _to_int(value) -> int:
    if isinstance(value, bool):
        raise ValueError("booleans are not counts of seconds")
    number = int(float(value))
    if number < 0:
        raise ValueError(f"{value} is negative")
    return number


_CONVERTERS = {"int": _to_int, "bool": parse_flag}


def convert(key: str, value):
    """Return ``value`` as the declared type of ``key``.

    Raises :class:`KeyError` for unknown keys and :class:`ValueError` when
    the value cannot be read as that type.
    """

    if key not in _DEFAULTS:
        raise KeyError(f"Unknown setting '{key}'")
    try:
        return _CONVERTERS[_DEFAULTS[key]["type"]](value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"Invalid value for '{key}': {exc}") from exc


def _normalized(stored: list) -> list[dict]:
    values = {}
    for item in stored:
        if not isinstance(item, dict) or item.get("key") not in _DEFAULTS:
            continue
        try:
            values[item["key"]] = convert(item["key"], item.get("value"))
        except ValueError:
            logging.warning("Ignoring bad stored value for setting '%s'", item["key"])
    return [
        {**item, "value": values.get(item["key"], item["value"])}
        for item in DEFAULT_SETTINGS
    ]


def load_settings() -> list[dict]:
    """Read :data:`SETTINGS_PATH`, writing the defaults when it is unusable."""

    try:
        with SETTINGS_PATH.open("r", encoding="utf-8") as fh:
            stored = json.load(fh)
    except FileNotFoundError:
        stored = None
    except (OSError, ValueError):
        logging.warning("Settings file %s unreadable, using defaults", SETTINGS_PATH)
        stored = None
    if isinstance(stored, list):
        return _normalized(stored)
    defaults = [dict(item) for item in DEFAULT_SETTINGS]
    save_settings(defaults)
    return defaults


def save_settings(items: list[dict]) -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with SETTINGS_PATH.open("w", encoding="utf-8") as fh:
        json.dump(items, fh, indent=2)


def _current() -> list[dict]:
    global _cache
    if _cache is None:
        _cache = load_settings()
    return _cache


def reset_cache() -> None:
    """Forget the loaded settings so the next read hits the disk."""

    global _cache
    _cache = None


def get_value(key: str):
    """Return the value of ``key`` or ``None`` for unknown keys."""

    for item in _current():
        if item["key"] == key:
            return item["value"]
    return None


def set_value(key: str, value) -> None:
    """Convert ``value`` to the type of ``key`` and persist it."""

    converted = convert(key, value)
    items = _current()
    for item in items:
        if item["key"] == key:
            item["value"] = converted
    save_settings(items)
