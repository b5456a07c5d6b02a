"""Turn a finished session into progress entries.

Only completed sets count. An exercise without completed sets leaves no
trace in history. A superset produces two entries, one per movement.

Two paths write supersets and they do not agree on how the halves are
linked:

* the live session path (:func:`record_session`) writes the partner with an
  empty exercise id and, unless ``link_supersets`` is enabled, nothing but
  the shared timestamp ties the two rows together;
* the trainer-assigned path (:func:`record_assigned_exercise`) gives the
  partner the primary id plus :data:`gymlog.PARTNER_ID_SUFFIX` and a shared
  ``pair_id``.

The history reconstructor understands both ``pair_id`` and the suffix, so
only the first path yields standalone rows for its supersets.
"""

from __future__ import annotations

import logging
import math
import sqlite3
from pathlib import Path

from gymlog import DEFAULT_DB_PATH
from gymlog import settings
from gymlog.history import add_progress_entry
from gymlog.session_state import completed_sets
from gymlog.utils import new_id, now_iso, parse_superset_primary, partner_exercise_id


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize_sets(
    sets: list[dict], reps_key: str = "reps", weight_key: str = "weight"
) -> dict:
    """Return the representative values of completed ``sets``.

    Weight is the heaviest set, reps the mean rounded to the nearest
    integer (halves round up) and ``sets_data`` keeps every set in order.
    """

    if not sets:
        return {"sets_completed": 0, "weight_used": 0, "reps_completed": 0, "sets_data": []}
    reps = [s[reps_key] for s in sets]
    return {
        "sets_completed": len(sets),
        "weight_used": max(s[weight_key] for s in sets),
        "reps_completed": _round_half_up(sum(reps) / len(reps)),
        "sets_data": [
            {"set_number": s["set_number"], "reps": s[reps_key], "weight": s[weight_key]}
            for s in sets
        ],
    }


def entries_for_exercise(
    exercise: dict,
    user_id: str,
    date: str,
    link_supersets: bool = False,
) -> list[dict]:
    """Return the progress entries one session exercise produces."""

    done = completed_sets(exercise)
    if not done:
        return []

    notes = exercise.get("notes") or None
    primary = {
        "id": new_id(),
        "user_id": user_id,
        "exercise_id": exercise.get("exercise_id") or "",
        "exercise_name": parse_superset_primary(exercise["exercise_name"]),
        "muscle": exercise["muscle"],
        "date": date,
        "notes": notes,
        "pair_id": None,
        "pair_slot": None,
        **summarize_sets(done),
    }
    if not exercise.get("is_superset"):
        return [primary]

    partner = {
        "id": new_id(),
        "user_id": user_id,
        "exercise_id": "",
        "exercise_name": exercise["partner_name"],
        "muscle": exercise["partner_muscle"],
        "date": date,
        "notes": None,
        "pair_id": None,
        "pair_slot": None,
        **summarize_sets(done, "partner_reps", "partner_weight"),
    }
    if link_supersets:
        pair_id = new_id()
        primary.update(pair_id=pair_id, pair_slot=1)
        partner.update(pair_id=pair_id, pair_slot=2)
    return [primary, partner]


def build_progress_entries(
    session: dict,
    user_id: str,
    now: str | None = None,
    link_supersets: bool = False,
) -> list[dict]:
    """Return every entry finalizing ``session`` would write, in order."""

    date = now or now_iso()
    entries: list[dict] = []
    for exercise in session["exercises"]:
        entries.extend(entries_for_exercise(exercise, user_id, date, link_supersets))
    return entries


def record_session(
    session: dict,
    user_id: str,
    db_path: Path = DEFAULT_DB_PATH,
    now: str | None = None,
    link_supersets: bool | None = None,
) -> dict:
    """Write the entries of ``session`` to the history store.

    Exercises are written independently: a failing write is logged and
    reported under ``failed`` while the remaining exercises are still
    written. Nothing already written is rolled back.
    """

    if link_supersets is None:
        link_supersets = bool(settings.get_value("link_supersets"))
    written: list[dict] = []
    failed: list[dict] = []
    for entry in build_progress_entries(session, user_id, now, link_supersets):
        try:
            written.append(add_progress_entry(entry, db_path=db_path))
        except (sqlite3.Error, ValueError) as exc:
            logging.exception("Failed to record progress for %s", entry["exercise_name"])
            failed.append({"exercise_name": entry["exercise_name"], "error": str(exc)})
    return {"written": written, "failed": failed}


def build_assigned_entries(
    exercise: dict, user_id: str, date: str | None = None
) -> list[dict]:
    """Return entries for an exercise logged against a trainer-assigned plan.

    The partner of a superset is written under the primary id plus the
    reserved suffix and both halves share a ``pair_id``.
    """

    date = date or now_iso()
    entries = entries_for_exercise(exercise, user_id, date, link_supersets=True)
    if len(entries) == 2 and entries[0]["exercise_id"]:
        entries[1]["exercise_id"] = partner_exercise_id(entries[0]["exercise_id"])
    return entries


def record_assigned_exercise(
    exercise: dict,
    user_id: str,
    db_path: Path = DEFAULT_DB_PATH,
    date: str | None = None,
) -> list[dict]:
    """Write the entries of one trainer-assigned exercise and return them."""

    return [
        add_progress_entry(entry, db_path=db_path)
        for entry in build_assigned_entries(exercise, user_id, date)
    ]
