"""Pure transitions of an active workout session.

A session is a plain JSON-serialisable dict. Every transition takes the
current dict and returns a new one; the argument is never modified, so a
caller holding an older state keeps seeing exactly what it had. The
:class:`gymlog.workout_session.SessionController` owns the current state
and is the only place that swaps it.

Session layout::

    {
        "workout_id": <template id or CUSTOM_WORKOUT_ID>,
        "workout_name": str,
        "started_at": ISO-8601 str,
        "recovery_seconds": int,
        "is_custom": bool,
        "exercises": [exercise, ...],
    }

Each exercise holds its targets, optional superset partner fields, free
text ``notes`` and a ``sets`` list whose length always equals
``target_sets`` with ``set_number`` running 1..N.
"""

from __future__ import annotations

import copy
import math

from gymlog import CUSTOM_WORKOUT_ID, DEFAULT_SETS_PER_EXERCISE
from gymlog.seeding import seed_exercise_defaults
from gymlog.templates import target_reps, target_weight, validate_template_exercise
from gymlog.utils import make_superset_name, new_id, parse_flag

SET_FIELDS = ("reps", "weight", "completed")
PARTNER_SET_FIELDS = ("partner_reps", "partner_weight")


def _build_sets(
    set_count: int,
    reps: list,
    weights: list,
    partner_reps: list | None = None,
    partner_weights: list | None = None,
) -> list[dict]:
    sets = []
    for idx in range(set_count):
        record = {
            "set_number": idx + 1,
            "reps": reps[idx],
            "weight": weights[idx],
            "completed": False,
        }
        if partner_reps is not None:
            record["partner_reps"] = partner_reps[idx]
            record["partner_weight"] = partner_weights[idx]
        sets.append(record)
    return sets


def build_exercise(
    template_exercise: dict, progress_log: list[dict], exercise_name: str | None = None
) -> dict:
    """Return a session exercise for ``template_exercise`` seeded from history."""

    partner = template_exercise.get("partner") or None
    set_count = template_exercise.get("sets") or DEFAULT_SETS_PER_EXERCISE
    seeded = seed_exercise_defaults(
        {**template_exercise, "sets": set_count}, progress_log
    )
    exercise = {
        "exercise_id": template_exercise.get("id") or new_id(),
        "exercise_name": exercise_name or template_exercise["name"],
        "muscle": template_exercise.get("muscle", ""),
        "target_sets": set_count,
        "target_reps": template_exercise.get("reps", 0),
        "target_weight": template_exercise.get("target_weight", 0),
        "note": template_exercise.get("note"),
        "rest_seconds": template_exercise.get("rest_seconds"),
        "is_superset": partner is not None,
        "partner_name": None,
        "partner_muscle": None,
        "partner_target_reps": None,
        "partner_target_weight": None,
        "notes": "",
    }
    if partner is not None:
        exercise.update(
            {
                "partner_name": partner["name"],
                "partner_muscle": partner.get("muscle", ""),
                "partner_target_reps": partner.get("reps", 0),
                "partner_target_weight": partner.get("target_weight", 0),
            }
        )
    exercise["sets"] = _build_sets(
        set_count,
        seeded["reps"],
        seeded["weight"],
        seeded["partner_reps"],
        seeded["partner_weight"],
    )
    return exercise


def new_template_session(
    template: dict,
    progress_log: list[dict],
    recovery_seconds: int,
    started_at: str,
) -> dict:
    """Return a session for ``template`` with every set seeded from history."""

    return {
        "workout_id": template["id"],
        "workout_name": template["name"],
        "started_at": started_at,
        "recovery_seconds": int(recovery_seconds),
        "is_custom": False,
        "exercises": [
            build_exercise(ex, progress_log) for ex in template.get("exercises", [])
        ],
    }


def new_custom_session(name: str, recovery_seconds: int, started_at: str) -> dict:
    """Return an empty session that exercises are added to as they happen."""

    return {
        "workout_id": CUSTOM_WORKOUT_ID,
        "workout_name": name,
        "started_at": started_at,
        "recovery_seconds": int(recovery_seconds),
        "is_custom": True,
        "exercises": [],
    }


def validate_new_exercise(exercise: dict) -> list[str]:
    """Return errors preventing ``exercise`` from being added to a session."""

    return validate_template_exercise(exercise)


def add_exercise(
    state: dict, exercise: dict, progress_log: list[dict] | None = None
) -> dict:
    """Return ``state`` with ``exercise`` appended.

    Only custom sessions accept new exercises. Supersets are named
    ``Superset (A+B)``; the partner defaults are seeded from history by
    name. Raises :class:`ValueError` without touching ``state`` when the
    input is incomplete.
    """

    errors = []
    if not state.get("is_custom"):
        errors.append("Exercises can only be added to a custom session")
    errors.extend(validate_new_exercise(exercise))
    if errors:
        raise ValueError("; ".join(errors))

    template_exercise = {
        "id": new_id(),
        "name": exercise["name"].strip(),
        "muscle": exercise["muscle"].strip(),
        "sets": exercise.get("sets") or DEFAULT_SETS_PER_EXERCISE,
        "reps": target_reps(exercise.get("reps", 0)),
        "target_weight": target_weight(exercise.get("target_weight", 0)),
        "note": exercise.get("note"),
        "rest_seconds": exercise.get("rest_seconds"),
        "partner": None,
    }
    display_name = None
    partner = exercise.get("partner")
    if partner:
        template_exercise["partner"] = {
            "name": partner["name"].strip(),
            "muscle": partner["muscle"].strip(),
            "reps": target_reps(partner.get("reps", 0)),
            "target_weight": target_weight(partner.get("target_weight", 0)),
        }
        display_name = make_superset_name(
            template_exercise["name"], template_exercise["partner"]["name"]
        )

    new_state = copy.deepcopy(state)
    new_state["exercises"].append(
        build_exercise(template_exercise, progress_log or [], exercise_name=display_name)
    )
    return new_state


def _check_index(state: dict, exercise_index: int, set_index: int | None = None) -> None:
    exercises = state["exercises"]
    if exercise_index < 0 or exercise_index >= len(exercises):
        raise IndexError("Invalid exercise index")
    if set_index is not None and (
        set_index < 0 or set_index >= len(exercises[exercise_index]["sets"])
    ):
        raise IndexError("Invalid set index")


def _coerce(field: str, value):
    if field == "completed":
        return parse_flag(value)
    if field in ("reps", "partner_reps"):
        try:
            return max(0, int(float(value)))
        except (TypeError, ValueError, OverflowError):
            return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, number) if math.isfinite(number) else 0.0


def update_set(
    state: dict, exercise_index: int, set_index: int, field: str, value
) -> tuple[dict, bool]:
    """Return ``(new_state, newly_completed)`` after changing one set field.

    ``newly_completed`` is ``True`` only when ``completed`` flips from false
    to true; it is the single event that starts recovery. Numeric input that
    cannot be read, or is negative, is stored as 0. A ``completed`` value
    that is not a recognised yes/no raises :class:`ValueError`.
    """

    _check_index(state, exercise_index, set_index)
    exercise = state["exercises"][exercise_index]
    record = exercise["sets"][set_index]
    allowed = SET_FIELDS + (PARTNER_SET_FIELDS if exercise.get("is_superset") else ())
    if field not in allowed:
        raise KeyError(f"Unknown set field '{field}' for exercise {exercise_index}")

    new_value = _coerce(field, value)
    newly_completed = field == "completed" and new_value and not record["completed"]

    new_state = copy.deepcopy(state)
    new_state["exercises"][exercise_index]["sets"][set_index][field] = new_value
    return new_state, bool(newly_completed)


def update_notes(state: dict, exercise_index: int, text: str) -> dict:
    """Return ``state`` with the free-text notes of one exercise replaced."""

    _check_index(state, exercise_index)
    new_state = copy.deepcopy(state)
    new_state["exercises"][exercise_index]["notes"] = text or ""
    return new_state


def clamp_cursor(state: dict, index: int) -> int:
    """Return ``index`` limited to the exercises of ``state``."""

    count = len(state["exercises"])
    if count == 0:
        return 0
    return max(0, min(count - 1, index))


def can_cancel(cursor: int) -> bool:
    """Cancelling is offered while the first exercise is shown."""

    return cursor == 0


def validate_for_finalize(state: dict) -> list[str]:
    if not state.get("is_custom") and not state["exercises"]:
        return ["Workout has no exercises"]
    return []


def completed_sets(exercise: dict) -> list[dict]:
    return [s for s in exercise["sets"] if s["completed"]]


def session_progress(state: dict) -> dict:
    """Return completed/total set counts over the whole session."""

    total = sum(len(ex["sets"]) for ex in state["exercises"])
    done = sum(len(completed_sets(ex)) for ex in state["exercises"])
    return {"completed": done, "total": total}
