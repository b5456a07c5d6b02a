"""History store: the append-only log of progress entries.

One entry is written per movement performed. Entries are never updated;
removing a day of training soft-deletes its rows.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from numbers import Number
from pathlib import Path

from gymlog import DEFAULT_DB_PATH
from gymlog.utils import new_id, parse_timestamp

_COLUMNS = (
    "id, user_id, exercise_id, exercise_name, muscle, date, sets_completed,"
    " weight_used, reps_completed, notes, sets_data_json, pair_id, pair_slot"
)


def _is_non_negative_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_non_negative_number(value) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool) and value >= 0


def validate_progress_entry(entry: dict) -> list[str]:
    """Return a list of problems preventing ``entry`` from being stored."""

    errors: list[str] = []
    if not isinstance(entry.get("exercise_id", ""), str):
        errors.append("exercise_id must be a string")
    for key in ("user_id", "exercise_name", "muscle"):
        if not str(entry.get(key) or "").strip():
            errors.append(f"{key} is required")
    date = entry.get("date")
    if not date:
        errors.append("date is required")
    else:
        try:
            parse_timestamp(date)
        except (TypeError, ValueError):
            errors.append(f"date '{date}' is not an ISO-8601 timestamp")
    for key in ("sets_completed", "reps_completed"):
        if not _is_non_negative_int(entry.get(key, 0)):
            errors.append(f"{key} must be a non-negative integer")
    if not _is_non_negative_number(entry.get("weight_used", 0)):
        errors.append("weight_used must be a non-negative number")
    notes = entry.get("notes")
    if notes is not None and not isinstance(notes, str):
        errors.append("notes must be a string")
    sets_data = entry.get("sets_data")
    if sets_data is not None:
        for item in sets_data:
            number = item.get("set_number")
            if not isinstance(number, int) or isinstance(number, bool) or number < 1:
                errors.append("set_number must be a positive integer")
            if not _is_non_negative_int(item.get("reps")):
                errors.append(f"set {number}: reps must be a non-negative integer")
            if not _is_non_negative_number(item.get("weight")):
                errors.append(f"set {number}: weight must be a non-negative number")
    if entry.get("pair_slot") not in (None, 1, 2):
        errors.append("pair_slot must be 1 or 2")
    if (entry.get("pair_id") is None) != (entry.get("pair_slot") is None):
        errors.append("pair_id and pair_slot must be given together")
    return errors


def _entry_from_row(row) -> dict:
    (
        entry_id,
        user_id,
        exercise_id,
        exercise_name,
        muscle,
        date,
        sets_completed,
        weight_used,
        reps_completed,
        notes,
        sets_data_json,
        pair_id,
        pair_slot,
    ) = row
    sets_data = None
    if sets_data_json:
        try:
            sets_data = json.loads(sets_data_json)
        except ValueError:
            logging.warning("Progress entry %s has unreadable set data", entry_id)
    return {
        "id": entry_id,
        "user_id": user_id,
        "exercise_id": exercise_id,
        "exercise_name": exercise_name,
        "muscle": muscle,
        "date": date,
        "sets_completed": sets_completed,
        "weight_used": weight_used,
        "reps_completed": reps_completed,
        "notes": notes,
        "sets_data": sets_data,
        "pair_id": pair_id,
        "pair_slot": pair_slot,
    }


def add_progress_entry(entry: dict, db_path: Path = DEFAULT_DB_PATH) -> dict:
    """Validate and append ``entry`` to the log.

    A missing ``id`` is generated. Returns the stored entry.
    """

    errors = validate_progress_entry(entry)
    if errors:
        raise ValueError("; ".join(errors))

    stored = {
        "id": entry.get("id") or new_id(),
        "user_id": entry["user_id"],
        "exercise_id": entry.get("exercise_id") or "",
        "exercise_name": entry["exercise_name"],
        "muscle": entry["muscle"],
        "date": entry["date"],
        "sets_completed": entry.get("sets_completed", 0),
        "weight_used": entry.get("weight_used", 0),
        "reps_completed": entry.get("reps_completed", 0),
        "notes": entry.get("notes"),
        "sets_data": entry.get("sets_data"),
        "pair_id": entry.get("pair_id"),
        "pair_slot": entry.get("pair_slot"),
    }
    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            f"INSERT INTO progress_entries ({_COLUMNS}) VALUES"
            " (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                stored["id"],
                stored["user_id"],
                stored["exercise_id"],
                stored["exercise_name"],
                stored["muscle"],
                stored["date"],
                stored["sets_completed"],
                stored["weight_used"],
                stored["reps_completed"],
                stored["notes"],
                json.dumps(stored["sets_data"])
                if stored["sets_data"] is not None
                else None,
                stored["pair_id"],
                stored["pair_slot"],
            ),
        )
        conn.commit()
    return stored


def get_user_progress(
    user_id: str,
    db_path: Path = DEFAULT_DB_PATH,
    start: str | None = None,
    end: str | None = None,
) -> list[dict]:
    """Return the log of ``user_id`` ordered by date, oldest first.

    ``start`` and ``end`` bound the ``date`` column as a half-open range
    ``[start, end)`` using string comparison on the stored ISO values.
    """

    query = f"SELECT {_COLUMNS} FROM progress_entries WHERE user_id = ? AND deleted = 0"
    params: list = [user_id]
    if start is not None:
        query += " AND date >= ?"
        params.append(start)
    if end is not None:
        query += " AND date < ?"
        params.append(end)
    query += " ORDER BY date, rowid"
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(query, params)
        rows = cursor.fetchall()
    entries = [_entry_from_row(row) for row in rows]
    # stored offsets may differ, so order on the parsed instant
    entries.sort(key=lambda e: parse_timestamp(e["date"]))
    return entries


def delete_progress_entries(ids: list[str], db_path: Path = DEFAULT_DB_PATH) -> int:
    """Soft-delete the entries in ``ids`` and return how many were removed."""

    if not ids:
        return 0
    placeholders = ", ".join("?" for _ in ids)
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE progress_entries SET deleted = 1"
            f" WHERE deleted = 0 AND id IN ({placeholders})",
            list(ids),
        )
        conn.commit()
        return cursor.rowcount
