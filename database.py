"""
Read-only access to Dayflow's SQLite database.

The database is always opened with mode=ro; nothing here can modify
Dayflow's data. Cards come back ordered by start_ts, which the note
timeline relies on.
"""
import sqlite3
from pathlib import Path
from typing import Optional

from schemas import ActivityRecord, JournalRecord


class DatabaseNotFoundError(FileNotFoundError):
    """The Dayflow database file does not exist."""

    def __init__(self, path: Path):
        super().__init__(f"Dayflow database not found: {path}")
        self.path = path


class DatabaseOpenError(RuntimeError):
    """The database exists but can't be opened or queried."""

    def __init__(self, path: Path, cause: Exception):
        super().__init__(f"Failed to open Dayflow database {path}: {cause}")
        self.path = path
        self.cause = cause


CARDS_QUERY = """
    SELECT
      id, batch_id, start, end, start_ts, end_ts, day,
      title, summary, detailed_summary, category, subcategory,
      metadata, video_summary_url, created_at, is_deleted
    FROM timeline_cards
    WHERE day = ? {deleted_filter}
    ORDER BY start_ts ASC
"""

JOURNAL_QUERY = """
    SELECT
      id, day, intentions, notes, goals, reflections,
      summary, status, created_at, updated_at
    FROM journal_entries
    WHERE day = ?
"""


def open_database(path: Path) -> sqlite3.Connection:
    """
    Open the database read-only and check it has timeline cards.

    Raises DatabaseNotFoundError or DatabaseOpenError.
    """
    path = Path(path)
    if not path.is_file():
        raise DatabaseNotFoundError(path)

    conn = None
    try:
        conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
        conn.row_factory = sqlite3.Row
        conn.execute("SELECT COUNT(*) FROM timeline_cards").fetchone()
    except sqlite3.Error as e:
        if conn is not None:
            conn.close()
        raise DatabaseOpenError(path, e) from e
    return conn


def fetch_cards_for_day(conn: sqlite3.Connection, day: str,
                        include_deleted: bool = False) -> list[ActivityRecord]:
    deleted_filter = "" if include_deleted else "AND is_deleted = 0"
    rows = conn.execute(CARDS_QUERY.format(deleted_filter=deleted_filter), (day,)).fetchall()
    return [ActivityRecord.model_validate(dict(row)) for row in rows]


def fetch_journal_for_day(conn: sqlite3.Connection, day: str) -> Optional[JournalRecord]:
    row = conn.execute(JOURNAL_QUERY, (day,)).fetchone()
    return JournalRecord.model_validate(dict(row)) if row else None
