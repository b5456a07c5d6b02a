"""Shared sample data for the test-suite."""

USER_ID = "user-1"
TEMPLATE_ID = "push-day"

SAMPLE_TEMPLATE = {
    "id": TEMPLATE_ID,
    "name": "Push Day",
    "created_at": "2024-01-01T08:00:00+00:00",
    "exercises": [
        {
            "id": "bench",
            "name": "Bench Press",
            "muscle": "Chest",
            "sets": 3,
            "reps": 10,
            "target_weight": 40,
            "note": "Pause at the bottom",
            "rest_seconds": 120,
            "partner": None,
        },
        {
            "id": "curl",
            "name": "Curl",
            "muscle": "Biceps",
            "sets": 2,
            "reps": 12,
            "target_weight": 12.5,
            "partner": {
                "name": "Pushdown",
                "muscle": "Triceps",
                "reps": 15,
                "target_weight": 20,
            },
        },
    ],
}


def make_entry(name, date, /, **fields):
    """Return a progress entry dict with sensible defaults."""
    entry = {
        "id": f"{name}-{date}",
        "user_id": USER_ID,
        "exercise_id": "",
        "exercise_name": name,
        "muscle": "Legs",
        "date": date,
        "sets_completed": 3,
        "weight_used": 50,
        "reps_completed": 8,
        "notes": None,
        "sets_data": None,
        "pair_id": None,
        "pair_slot": None,
    }
    entry.update(fields)
    return entry
