"""Schema bootstrap for the SQLite database backing the stores."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from gymlog import DEFAULT_DB_PATH

# Schema file shipped next to the database
SCHEMA_PATH = Path(__file__).resolve().parents[1] / "data" / "gymlog_schema.sql"

# Tables every usable database must contain
REQUIRED_TABLES = [
    "workout_templates",
    "template_exercises",
    "progress_entries",
    "body_weights",
]


def init_db(db_path: Path = DEFAULT_DB_PATH) -> Path:
    """Create any missing tables in ``db_path`` and return the path."""

    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(SCHEMA_PATH, "r", encoding="utf-8") as fh:
        script = fh.read()
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(script)
        conn.commit()
    finally:
        conn.close()
    return path


def missing_tables(db_path: Path = DEFAULT_DB_PATH) -> list[str]:
    """Return the names of required tables absent from ``db_path``."""

    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
        present = {row[0] for row in cur.fetchall()}
    return [name for name in REQUIRED_TABLES if name not in present]
