"""Daily body-weight entries, one per user per calendar day."""

from __future__ import annotations

import sqlite3
from datetime import date as _date
from pathlib import Path

from gymlog import DEFAULT_DB_PATH
from gymlog.utils import new_id


def _check_weight(weight) -> None:
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight <= 0:
        raise ValueError("Body weight must be a positive number")


def get_body_weight_for_day(
    user_id: str, day: str, db_path: Path = DEFAULT_DB_PATH
) -> dict | None:
    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute(
            "SELECT id, user_id, date, weight FROM body_weights"
            " WHERE user_id = ? AND date = ? AND deleted = 0",
            (user_id, day),
        )
        row = cur.fetchone()
    if not row:
        return None
    return {"id": row[0], "user_id": row[1], "date": row[2], "weight": row[3]}


def add_body_weight(
    user_id: str,
    weight: float,
    day: str | None = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> dict:
    """Record ``weight`` for ``day`` (today by default).

    A second reading on the same day replaces the first one.
    """

    _check_weight(weight)
    day = day or _date.today().isoformat()
    existing = get_body_weight_for_day(user_id, day, db_path=db_path)
    if existing:
        return update_body_weight(existing["id"], weight, db_path=db_path)
    entry = {"id": new_id(), "user_id": user_id, "date": day, "weight": weight}
    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            "INSERT INTO body_weights (id, user_id, date, weight) VALUES (?, ?, ?, ?)",
            (entry["id"], user_id, day, weight),
        )
        conn.commit()
    return entry


def update_body_weight(
    entry_id: str, weight: float, db_path: Path = DEFAULT_DB_PATH
) -> dict:
    _check_weight(weight)
    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute(
            "UPDATE body_weights SET weight = ? WHERE id = ? AND deleted = 0",
            (weight, entry_id),
        )
        if cur.rowcount == 0:
            raise KeyError(f"Body weight entry '{entry_id}' not found")
        conn.commit()
        cur.execute(
            "SELECT id, user_id, date, weight FROM body_weights WHERE id = ?",
            (entry_id,),
        )
        row = cur.fetchone()
    return {"id": row[0], "user_id": row[1], "date": row[2], "weight": row[3]}


def get_user_body_weights(user_id: str, db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Return all readings of ``user_id`` ordered by date."""

    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute(
            "SELECT id, user_id, date, weight FROM body_weights"
            " WHERE user_id = ? AND deleted = 0 ORDER BY date",
            (user_id,),
        )
        rows = cur.fetchall()
    return [
        {"id": r[0], "user_id": r[1], "date": r[2], "weight": r[3]} for r in rows
    ]
