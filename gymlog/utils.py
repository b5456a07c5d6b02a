"""Utility helpers used across gymlog modules.

Supersets are identified in stored history by two string conventions rather
than a foreign key:

* the combined display name ``Superset (<primary>+<partner>)`` used by
  sessions built by hand, and
* the partner id suffix (:data:`gymlog.PARTNER_ID_SUFFIX`) used by the
  trainer-assigned recording path.

Neither movement name may contain ``+`` or ``)``; the parser below would
silently pick the wrong substring.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

from gymlog import PARTNER_ID_SUFFIX

_SUPERSET_RE = re.compile(r"^Superset \(([^+]+)\+(.+)\)$")


def new_id() -> str:
    """Return a fresh identifier for stored records."""

    return uuid.uuid4().hex


def make_superset_name(primary: str, partner: str) -> str:
    """Return the combined display name for a superset."""

    return f"Superset ({primary}+{partner})"


def parse_superset_primary(name: str) -> str:
    """Return the primary movement of a ``Superset (A+B)`` name.

    Names that do not follow the convention are returned unchanged.
    """

    match = _SUPERSET_RE.match(name)
    if not match:
        return name
    return match.group(1)


def validate_movement_name(name: str) -> list[str]:
    """Return errors for characters that break the superset name contract."""

    errors = []
    for char in ("+", ")"):
        if char in name:
            errors.append(f"Exercise name may not contain '{char}' in a superset")
    return errors


def partner_exercise_id(exercise_id: str) -> str:
    """Return the id reserved for the second movement of ``exercise_id``."""

    return f"{exercise_id}{PARTNER_ID_SUFFIX}"


def is_partner_id(exercise_id: str | None) -> bool:
    return bool(exercise_id) and exercise_id.endswith(PARTNER_ID_SUFFIX) and (
        len(exercise_id) > len(PARTNER_ID_SUFFIX)
    )


def primary_exercise_id(exercise_id: str) -> str:
    """Strip the partner suffix from ``exercise_id`` if present."""

    if is_partner_id(exercise_id):
        return exercise_id[: -len(PARTNER_ID_SUFFIX)]
    return exercise_id


def normalize_name(name: str | None) -> str:
    """Return the key used to compare exercise names."""

    return (name or "").strip().casefold()


def now_iso() -> str:
    """Return the current local time as an ISO-8601 string with offset."""

    return datetime.now().astimezone().isoformat(timespec="seconds")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware :class:`datetime`.

    Naive timestamps are treated as UTC so that mixed records stay
    comparable.
    """

    stamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp


def calendar_date(value: str) -> str:
    """Return the ``YYYY-MM-DD`` date written in the ISO timestamp ``value``."""

    return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()


def format_seconds(seconds: int) -> str:
    """Return ``seconds`` formatted as ``m:ss``."""

    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


def parse_flag(value) -> bool:
    """Read a yes/no value typed or stored as text.

    ``None`` and blank text are false. Raises :class:`ValueError` for
    anything else that is not a recognised word or number.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off", ""):
        return False
    raise ValueError(f"'{value}' is not a yes/no value")
