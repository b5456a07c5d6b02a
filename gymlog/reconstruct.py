"""Regroup the flat progress log into sessions for display.

Entries are grouped by the calendar date written in their timestamp. Within
a day the two halves of a superset are merged back into one record:

1. entries sharing a ``pair_id`` are merged first (slot 1 is the primary);
2. legacy rows without a complete pair fall back to the id-suffix shim: an
   entry whose id ends in :data:`gymlog.PARTNER_ID_SUFFIX` is paired with
   the entry carrying the bare id, provided both were recorded within the
   pairing window.

Anything that does not pair is shown on its own. Ambiguity is never an
error. The output depends only on the input log, so regrouping the same log
twice gives identical results.
"""

from __future__ import annotations

from collections import defaultdict

from gymlog import PAIRING_WINDOW_SECONDS
from gymlog import settings
from gymlog.utils import (
    calendar_date,
    is_partner_id,
    normalize_name,
    parse_timestamp,
    partner_exercise_id,
    primary_exercise_id,
)

PARTNER_FIELDS = (
    "id",
    "exercise_id",
    "exercise_name",
    "muscle",
    "sets_completed",
    "weight_used",
    "reps_completed",
    "notes",
    "sets_data",
)


def _chronological(entries: list[dict]) -> list[dict]:
    return sorted(entries, key=lambda e: (parse_timestamp(e["date"]), e["id"]))


def _within(first: dict, second: dict, window_seconds: int) -> bool:
    delta = parse_timestamp(first["date"]) - parse_timestamp(second["date"])
    return abs(delta.total_seconds()) <= window_seconds


def _standalone(entry: dict) -> dict:
    return {**entry, "is_superset": False, "exercise2": None, "entry_ids": [entry["id"]]}


def _merged(primary: dict, partner: dict) -> dict:
    return {
        **primary,
        "is_superset": True,
        "exercise2": {field: partner.get(field) for field in PARTNER_FIELDS},
        "entry_ids": [primary["id"], partner["id"]],
    }


def _sort_key(record: dict):
    return (normalize_name(record["exercise_name"]), record["exercise_name"], record["id"])


def _find_unconsumed(
    entries: list[dict], consumed: set, exercise_id: str, near: dict, window_seconds: int
) -> dict | None:
    for candidate in entries:
        if candidate["id"] in consumed or candidate["id"] == near["id"]:
            continue
        if candidate.get("exercise_id") == exercise_id and _within(
            candidate, near, window_seconds
        ):
            return candidate
    return None


def group_day(
    entries: list[dict], window_seconds: int = PAIRING_WINDOW_SECONDS
) -> list[dict]:
    """Return the grouped exercises of one day, sorted by display name."""

    ordered = _chronological(entries)
    consumed: set = set()
    grouped: list[dict] = []

    by_pair: dict[str, dict[int, dict]] = defaultdict(dict)
    for entry in ordered:
        if entry.get("pair_id"):
            # first entry wins a slot; a duplicated slot is left to the shim
            by_pair[entry["pair_id"]].setdefault(entry.get("pair_slot"), entry)
    for slots in by_pair.values():
        if 1 in slots and 2 in slots:
            grouped.append(_merged(slots[1], slots[2]))
            consumed.update((slots[1]["id"], slots[2]["id"]))

    for entry in ordered:
        if entry["id"] in consumed:
            continue
        exercise_id = entry.get("exercise_id") or ""
        partner = primary = None
        if is_partner_id(exercise_id):
            primary = _find_unconsumed(
                ordered, consumed, primary_exercise_id(exercise_id), entry, window_seconds
            )
            partner = entry if primary else None
        elif exercise_id:
            partner = _find_unconsumed(
                ordered, consumed, partner_exercise_id(exercise_id), entry, window_seconds
            )
            primary = entry if partner else None

        if primary and partner:
            grouped.append(_merged(primary, partner))
            consumed.update((primary["id"], partner["id"]))
        else:
            grouped.append(_standalone(entry))
            consumed.add(entry["id"])

    return sorted(grouped, key=_sort_key)


def sessions_by_date(log: list[dict], window_seconds: int | None = None) -> list[dict]:
    """Return ``{date, exercises, entry_ids}`` per training day, newest first."""

    if window_seconds is None:
        window_seconds = settings.get_value("pairing_window_seconds")
        if window_seconds is None:
            window_seconds = PAIRING_WINDOW_SECONDS

    days: dict[str, list[dict]] = defaultdict(list)
    for entry in log:
        days[calendar_date(entry["date"])].append(entry)

    sessions = []
    for day in sorted(days, reverse=True):
        entries = days[day]
        sessions.append(
            {
                "date": day,
                "exercises": group_day(entries, window_seconds),
                "entry_ids": [e["id"] for e in _chronological(entries)],
            }
        )
    return sessions


def filter_month(log: list[dict], year: int, month: int) -> list[dict]:
    """Return the entries of ``log`` dated in ``year``/``month``."""

    prefix = f"{int(year):04d}-{int(month):02d}-"
    return [e for e in log if calendar_date(e["date"]).startswith(prefix)]


def available_years(log: list[dict]) -> list[int]:
    """Return the years that have entries, newest first."""

    return sorted({int(calendar_date(e["date"])[:4]) for e in log}, reverse=True)


def weight_range(record: dict) -> tuple:
    """Return ``(lowest, heaviest)`` weight lifted in ``record``."""

    weights = [s["weight"] for s in record.get("sets_data") or []]
    if not weights:
        weights = [record.get("weight_used") or 0]
    return min(weights), max(weights)
