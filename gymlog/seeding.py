"""Default values for a new session taken from the most recent history.

Re-running a workout pre-fills every set with what was lifted in that set
last time instead of a flat target. The primary movement is matched on its
exercise id; the partner movement of a superset has no stable id and is
matched on its name.
"""

from __future__ import annotations

from gymlog import DEFAULT_SETS_PER_EXERCISE
from gymlog.utils import normalize_name, parse_timestamp


def latest_matching_entry(
    progress_log: list[dict],
    *,
    exercise_id: str | None = None,
    name: str | None = None,
) -> dict | None:
    """Return the newest entry for ``exercise_id`` or, failing that, ``name``.

    Only one of the two keys is used: the id when it is non-empty, the
    normalised name otherwise.
    """

    if exercise_id:
        matches = [e for e in progress_log if e.get("exercise_id") == exercise_id]
    elif name and name.strip():
        key = normalize_name(name)
        matches = [
            e for e in progress_log if normalize_name(e.get("exercise_name")) == key
        ]
    else:
        return None
    if not matches:
        return None
    return max(matches, key=lambda e: parse_timestamp(e["date"]))


def per_set_values(
    entry: dict | None, set_count: int, target_reps, target_weight
) -> tuple[list, list]:
    """Return ``(reps, weights)`` lists of length ``set_count``.

    Set ``i`` takes the value recorded for set number ``i`` in ``entry``;
    numbers that were not recorded take the last recorded set. Without
    structured set data every set takes the template target.
    """

    sets_data = (entry or {}).get("sets_data") or []
    if not sets_data:
        return [target_reps] * set_count, [target_weight] * set_count

    by_number = {item["set_number"]: item for item in sets_data}
    last = sets_data[-1]
    reps: list = []
    weights: list = []
    for number in range(1, set_count + 1):
        recorded = by_number.get(number, last)
        reps.append(recorded["reps"])
        weights.append(recorded["weight"])
    return reps, weights


def seed_exercise_defaults(template_exercise: dict, progress_log: list[dict]) -> dict:
    """Compute starting values for every set of ``template_exercise``.

    The result holds ``reps`` and ``weight`` lists and, for supersets,
    ``partner_reps`` and ``partner_weight`` lists (``None`` otherwise).
    """

    set_count = template_exercise.get("sets") or DEFAULT_SETS_PER_EXERCISE
    latest = latest_matching_entry(progress_log, exercise_id=template_exercise.get("id"))
    reps, weight = per_set_values(
        latest,
        set_count,
        template_exercise.get("reps", 0),
        template_exercise.get("target_weight", 0),
    )
    seeded = {
        "reps": reps,
        "weight": weight,
        "partner_reps": None,
        "partner_weight": None,
    }

    partner = template_exercise.get("partner")
    if partner:
        partner_latest = latest_matching_entry(progress_log, name=partner.get("name"))
        seeded["partner_reps"], seeded["partner_weight"] = per_set_values(
            partner_latest,
            set_count,
            partner.get("reps", 0),
            partner.get("target_weight", 0),
        )
    return seeded
