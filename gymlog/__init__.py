"""Shared constants and globals for gymlog modules."""

from __future__ import annotations

from pathlib import Path

# Default values used throughout the application
DEFAULT_SETS_PER_EXERCISE = 3
DEFAULT_RECOVERY_SECONDS = 60
RECOVERY_EXTEND_SECONDS = 30

# Recovery durations offered when starting a workout
RECOVERY_CHOICES = (30, 60, 90, 120)

# Id used for sessions that were not started from a template
CUSTOM_WORKOUT_ID = "custom"

# Suffix appended to a primary exercise id to mark the second movement of a
# superset written by the trainer-assigned path.  Generated ids are uuid hex
# strings and never contain an underscore.
PARTNER_ID_SUFFIX = "_ex2"

# Maximum distance between the two halves of a legacy superset record
PAIRING_WINDOW_SECONDS = 60

# Path to the SQLite database holding templates, history and body weights
DEFAULT_DB_PATH = (
    Path(__file__).resolve().parent.parent / "data" / "gymlog.db"
)

__all__ = [
    "DEFAULT_SETS_PER_EXERCISE",
    "DEFAULT_RECOVERY_SECONDS",
    "RECOVERY_EXTEND_SECONDS",
    "RECOVERY_CHOICES",
    "CUSTOM_WORKOUT_ID",
    "PARTNER_ID_SUFFIX",
    "PAIRING_WINDOW_SECONDS",
    "DEFAULT_DB_PATH",
]
