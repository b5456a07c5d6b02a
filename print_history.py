import sys
from datetime import date

from gymlog import DEFAULT_DB_PATH
from gymlog.history import get_user_progress
from gymlog.reconstruct import filter_month, sessions_by_date, weight_range

DB_PATH = DEFAULT_DB_PATH  # Change this to your DB file path
USER_ID = "local"


def format_weight(record):
    """Return the weight lifted in ``record`` as ``40`` or ``40-42.5``."""
    low, high = weight_range(record)
    if low == high:
        return f"{high:g}"
    return f"{low:g}-{high:g}"


def describe(record):
    name = record["exercise_name"]
    if record["is_superset"]:
        name = f"{name} + {record['exercise2']['exercise_name']}"
    return (
        f"{name}: {record['sets_completed']} sets x {record['reps_completed']} reps"
        f" @ {format_weight(record)}kg"
    )


def main(db_path=DB_PATH, user_id=USER_ID, year=None, month=None):
    today = date.today()
    year = year or today.year
    month = month or today.month

    log = filter_month(get_user_progress(user_id, db_path=db_path), year, month)
    sessions = sessions_by_date(log)
    if not sessions:
        print(f"No workouts in {year:04d}-{month:02d}")
        return

    for session in sessions:
        print(f"\n=== {session['date']} ===")
        for record in session["exercises"]:
            print(f"  {describe(record)}")
            if record.get("notes"):
                print(f"    Notes: {record['notes']}")


if __name__ == "__main__":
    args = sys.argv[1:]
    main(
        args[0] if len(args) > 0 else DB_PATH,
        args[1] if len(args) > 1 else USER_ID,
        int(args[2]) if len(args) > 2 else None,
        int(args[3]) if len(args) > 3 else None,
    )
