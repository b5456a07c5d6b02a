"""Progress figures over the flat history log."""

from __future__ import annotations

from gymlog.utils import normalize_name, parse_timestamp


def _chronological(log: list[dict]) -> list[dict]:
    return sorted(log, key=lambda e: (parse_timestamp(e["date"]), e["id"]))


def unique_exercises(log: list[dict]) -> list[str]:
    """Return one display name per exercise in first-seen order.

    Names are compared trimmed and case-insensitively; the spelling of the
    earliest entry is kept.
    """

    seen: dict[str, str] = {}
    for entry in _chronological(log):
        key = normalize_name(entry["exercise_name"])
        if key and key not in seen:
            seen[key] = entry["exercise_name"].strip()
    return list(seen.values())


def exercise_series(log: list[dict], name: str) -> list[dict]:
    """Return the chronological weight/reps/sets series of one exercise."""

    key = normalize_name(name)
    return [
        {
            "date": entry["date"],
            "weight": entry["weight_used"],
            "reps": entry["reps_completed"],
            "sets": entry["sets_completed"],
        }
        for entry in _chronological(log)
        if normalize_name(entry["exercise_name"]) == key
    ]


def exercise_stats(series: list[dict]) -> dict | None:
    if not series:
        return None
    weights = [point["weight"] for point in series]
    first, last = weights[0], weights[-1]
    improvement = (last - first) / first * 100 if first > 0 else 0
    return {
        "max_weight": max(weights),
        "last_weight": last,
        "improvement": round(improvement, 1),
        "total_sessions": len(series),
    }
