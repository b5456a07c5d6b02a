"""Add the superset pairing columns to a legacy history database.

Older databases store superset halves as two unrelated ``progress_entries``
rows. This script backs up the database file and adds the ``pair_id`` and
``pair_slot`` columns (and ``deleted`` where missing). Existing rows keep
``pair_id`` empty and continue to be paired by the id-suffix rule when the
history is regrouped.
"""

from pathlib import Path
import shutil
import sqlite3
import sys

DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "data" / "gymlog.db"

NEW_COLUMNS = [
    ("pair_id", "TEXT"),
    ("pair_slot", "INTEGER"),
    ("deleted", "BOOLEAN NOT NULL DEFAULT 0"),
]


def log(message: str) -> None:
    """Print a formatted migration log message."""
    print(f"[migration] {message}")


def column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    cur = conn.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cur.fetchall())


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    cur = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?", (table,)
    )
    return cur.fetchone() is not None


def add_pairing_columns(conn: sqlite3.Connection) -> list[str]:
    """Add missing pairing columns to ``progress_entries``; return those added."""
    added = []
    for column, decl in NEW_COLUMNS:
        if not column_exists(conn, "progress_entries", column):
            conn.execute(f"ALTER TABLE progress_entries ADD COLUMN {column} {decl}")
            added.append(column)
    conn.execute(
        "UPDATE progress_entries SET pair_slot = NULL WHERE pair_id IS NULL"
    )
    return added


def main(db_path: Path) -> bool:
    if not db_path.exists():
        log(f"Database not found: {db_path}")
        return False
    backup_path = db_path.with_suffix(".bak")
    if not backup_path.exists():
        shutil.copy2(db_path, backup_path)
        log(f"Backed up database to {backup_path}")
    conn = sqlite3.connect(str(db_path))
    try:
        if not table_exists(conn, "progress_entries"):
            log("No progress_entries table; nothing to migrate.")
            return False
        added = add_pairing_columns(conn)
        conn.commit()
    finally:
        conn.close()
    if added:
        log(f"Added columns: {', '.join(added)}")
    log("Migration completed.")
    return True


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DB_PATH
    main(path)
