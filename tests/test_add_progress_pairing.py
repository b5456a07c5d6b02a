import importlib.util
from pathlib import Path
import sqlite3

MIGRATION = Path(__file__).resolve().parents[1] / "migrations" / "add_progress_pairing.py"


def _load():
    spec = importlib.util.spec_from_file_location("add_progress_pairing", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _legacy_db(path):
    with sqlite3.connect(str(path)) as conn:
        conn.execute(
            """
            CREATE TABLE progress_entries (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                exercise_id TEXT NOT NULL DEFAULT '',
                exercise_name TEXT NOT NULL,
                muscle TEXT NOT NULL,
                date TEXT NOT NULL,
                sets_completed INTEGER NOT NULL DEFAULT 0,
                weight_used REAL NOT NULL DEFAULT 0,
                reps_completed INTEGER NOT NULL DEFAULT 0,
                notes TEXT,
                sets_data_json TEXT
            )
            """
        )
        conn.execute(
            "INSERT INTO progress_entries (id, user_id, exercise_name, muscle, date)"
            " VALUES ('a', 'user-1', 'Squat', 'Legs', '2024-03-08T10:00:00+00:00')"
        )


def _columns(path):
    with sqlite3.connect(str(path)) as conn:
        return [row[1] for row in conn.execute("PRAGMA table_info(progress_entries)")]


def test_migration_adds_columns_and_backs_up(tmp_path):
    migration = _load()
    db = tmp_path / "gymlog.db"
    _legacy_db(db)
    assert migration.main(db) is True
    assert {"pair_id", "pair_slot", "deleted"} <= set(_columns(db))
    assert db.with_suffix(".bak").exists()

    from gymlog.history import get_user_progress

    (entry,) = get_user_progress("user-1", db_path=db)
    assert entry["pair_id"] is None


def test_migration_is_repeatable(tmp_path):
    migration = _load()
    db = tmp_path / "gymlog.db"
    _legacy_db(db)
    migration.main(db)
    before = _columns(db)
    assert migration.main(db) is True
    assert _columns(db) == before


def test_missing_database(tmp_path):
    assert _load().main(tmp_path / "nope.db") is False
