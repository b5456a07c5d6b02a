"""Template store: saved workout definitions owned by a user.

Templates are read-only to a running session; the session copies values
out of the template and never writes back except for ``last_used``.
"""

from __future__ import annotations

import math
import sqlite3
from pathlib import Path

from gymlog import DEFAULT_DB_PATH, DEFAULT_SETS_PER_EXERCISE
from gymlog.utils import new_id, now_iso, validate_movement_name


def _exercise_from_row(row) -> dict:
    (
        ex_id,
        name,
        muscle,
        sets,
        reps,
        target_weight,
        note,
        rest_seconds,
        partner_name,
        partner_muscle,
        partner_reps,
        partner_weight,
    ) = row
    partner = None
    if partner_name:
        partner = {
            "name": partner_name,
            "muscle": partner_muscle or "",
            "reps": partner_reps or 0,
            "target_weight": partner_weight or 0,
        }
    return {
        "id": ex_id,
        "name": name,
        "muscle": muscle,
        "sets": sets,
        "reps": reps,
        "target_weight": target_weight,
        "note": note,
        "rest_seconds": rest_seconds,
        "partner": partner,
    }


def _load_exercises(cursor: sqlite3.Cursor, template_id: str) -> list[dict]:
    cursor.execute(
        """
        SELECT id, name, muscle, sets, reps, target_weight, note, rest_seconds,
               partner_name, partner_muscle, partner_reps, partner_target_weight
          FROM template_exercises
         WHERE template_id = ? AND deleted = 0
         ORDER BY position
        """,
        (template_id,),
    )
    return [_exercise_from_row(row) for row in cursor.fetchall()]


def _template_from_row(cursor: sqlite3.Cursor, row) -> dict:
    template_id, user_id, name, is_active, last_used, created_at = row
    return {
        "id": template_id,
        "user_id": user_id,
        "name": name,
        "is_active": bool(is_active),
        "last_used": last_used,
        "created_at": created_at,
        "exercises": _load_exercises(cursor, template_id),
    }


_TEMPLATE_COLUMNS = "id, user_id, name, is_active, last_used, created_at"


def is_target_value(value) -> bool:
    """Whether ``value`` can be read as a non-negative reps/weight target."""

    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number >= 0


def target_reps(value) -> int:
    return int(float(value))


def target_weight(value) -> float:
    return float(value)


def validate_template_exercise(exercise: dict) -> list[str]:
    """Return problems that would stop ``exercise`` from being recorded.

    ``exercise`` has the template exercise layout. The same rules apply to
    exercises added on the fly to a custom session.
    """

    errors = []
    name = (exercise.get("name") or "").strip()
    if not name:
        errors.append("Exercise name is required")
    if not (exercise.get("muscle") or "").strip():
        errors.append("Muscle group is required")
    sets = exercise.get("sets")
    if sets is None:
        sets = DEFAULT_SETS_PER_EXERCISE
    if not isinstance(sets, int) or isinstance(sets, bool) or sets < 1:
        errors.append("Number of sets must be at least 1")
    if not is_target_value(exercise.get("reps", 0)):
        errors.append("Target reps must be a non-negative number")
    if not is_target_value(exercise.get("target_weight", 0)):
        errors.append("Target weight must be a non-negative number")

    partner = exercise.get("partner")
    if partner:
        partner_name = (partner.get("name") or "").strip()
        if not partner_name:
            errors.append("Second exercise name is required")
        if not (partner.get("muscle") or "").strip():
            errors.append("Second exercise muscle group is required")
        if not is_target_value(partner.get("reps", 0)):
            errors.append("Second exercise target reps must be a non-negative number")
        if not is_target_value(partner.get("target_weight", 0)):
            errors.append("Second exercise target weight must be a non-negative number")
        errors.extend(validate_movement_name(name))
        errors.extend(validate_movement_name(partner_name))
    return errors


def _partner_columns(partner: dict | None) -> tuple:
    if not partner:
        return (None, None, None, None)
    return (
        partner["name"].strip(),
        partner["muscle"].strip(),
        target_reps(partner.get("reps", 0)),
        target_weight(partner.get("target_weight", 0)),
    )


def validate_template(template: dict) -> list[str]:
    errors = []
    if not (template.get("name") or "").strip():
        errors.append("Template name is required")
    for position, exercise in enumerate(template.get("exercises", []), start=1):
        errors.extend(
            f"Exercise {position}: {error}"
            for error in validate_template_exercise(exercise)
        )
    return errors


def save_template(
    template: dict, user_id: str, db_path: Path = DEFAULT_DB_PATH
) -> dict:
    """Insert or replace ``template`` and its exercises for ``user_id``.

    Missing ids are generated. Exercises are rewritten wholesale in the order
    given. The stored template is returned.
    """

    errors = validate_template(template)
    if errors:
        raise ValueError("; ".join(errors))

    name = template["name"].strip()

    template_id = template.get("id") or new_id()
    created_at = template.get("created_at") or now_iso()

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT is_active, last_used FROM workout_templates WHERE id = ?",
            (template_id,),
        )
        existing = cursor.fetchone()
        is_active = template.get("is_active", bool(existing[0]) if existing else False)
        last_used = template.get("last_used", existing[1] if existing else None)
        cursor.execute(
            """
            INSERT OR REPLACE INTO workout_templates
                (id, user_id, name, is_active, last_used, created_at, deleted)
            VALUES (?, ?, ?, ?, ?, ?, 0)
            """,
            (template_id, user_id, name, int(bool(is_active)), last_used, created_at),
        )
        cursor.execute(
            "DELETE FROM template_exercises WHERE template_id = ?", (template_id,)
        )
        for position, ex in enumerate(template.get("exercises", [])):
            cursor.execute(
                """
                INSERT INTO template_exercises
                    (id, template_id, position, name, muscle, sets, reps,
                     target_weight, note, rest_seconds, partner_name,
                     partner_muscle, partner_reps, partner_target_weight)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    ex.get("id") or new_id(),
                    template_id,
                    position,
                    ex["name"].strip(),
                    ex["muscle"].strip(),
                    ex.get("sets") or DEFAULT_SETS_PER_EXERCISE,
                    target_reps(ex.get("reps", 0)),
                    target_weight(ex.get("target_weight", 0)),
                    ex.get("note"),
                    ex.get("rest_seconds"),
                    *_partner_columns(ex.get("partner")),
                ),
            )
        conn.commit()
    return get_template(template_id, db_path=db_path)


def get_template(template_id: str, db_path: Path = DEFAULT_DB_PATH) -> dict | None:
    """Return the template ``template_id`` or ``None`` when it does not exist."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {_TEMPLATE_COLUMNS} FROM workout_templates"
            " WHERE id = ? AND deleted = 0",
            (template_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return _template_from_row(cursor, row)


def list_templates(user_id: str, db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Return all templates of ``user_id`` in creation order."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {_TEMPLATE_COLUMNS} FROM workout_templates"
            " WHERE user_id = ? AND deleted = 0 ORDER BY created_at, rowid",
            (user_id,),
        )
        rows = cursor.fetchall()
        return [_template_from_row(cursor, row) for row in rows]


def delete_template(template_id: str, db_path: Path = DEFAULT_DB_PATH) -> None:
    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            "UPDATE workout_templates SET deleted = 1 WHERE id = ?", (template_id,)
        )
        conn.execute(
            "UPDATE template_exercises SET deleted = 1 WHERE template_id = ?",
            (template_id,),
        )
        conn.commit()


def set_active_template(
    user_id: str, template_id: str, db_path: Path = DEFAULT_DB_PATH
) -> None:
    """Mark ``template_id`` as the single active template of ``user_id``."""

    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            "UPDATE workout_templates SET is_active = (id = ?) WHERE user_id = ?",
            (template_id, user_id),
        )
        conn.commit()


def deactivate_template(template_id: str, db_path: Path = DEFAULT_DB_PATH) -> None:
    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            "UPDATE workout_templates SET is_active = 0 WHERE id = ?", (template_id,)
        )
        conn.commit()


def get_active_template(user_id: str, db_path: Path = DEFAULT_DB_PATH) -> dict | None:
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {_TEMPLATE_COLUMNS} FROM workout_templates"
            " WHERE user_id = ? AND is_active = 1 AND deleted = 0 LIMIT 1",
            (user_id,),
        )
        row = cursor.fetchone()
        return _template_from_row(cursor, row) if row else None


def mark_template_used(
    template_id: str, when: str | None = None, db_path: Path = DEFAULT_DB_PATH
) -> None:
    """Record that a session was started from ``template_id``."""

    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            "UPDATE workout_templates SET last_used = ? WHERE id = ?",
            (when or now_iso(), template_id),
        )
        conn.commit()


def get_last_used_template(
    user_id: str, db_path: Path = DEFAULT_DB_PATH
) -> dict | None:
    """Return the template ``user_id`` trained with most recently."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {_TEMPLATE_COLUMNS} FROM workout_templates"
            " WHERE user_id = ? AND deleted = 0 AND last_used IS NOT NULL"
            " ORDER BY last_used DESC LIMIT 1",
            (user_id,),
        )
        row = cursor.fetchone()
        return _template_from_row(cursor, row) if row else None
