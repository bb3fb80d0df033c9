"""
Shared pytest fixtures for Dayflow Sync tests.
"""
import json
import sqlite3
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from schemas import ActivityRecord, JournalRecord


CARDS_SCHEMA = """
CREATE TABLE timeline_cards (
    id INTEGER PRIMARY KEY,
    batch_id INTEGER,
    start TEXT,
    end TEXT,
    start_ts INTEGER,
    end_ts INTEGER,
    day TEXT,
    title TEXT,
    summary TEXT,
    detailed_summary TEXT,
    category TEXT,
    subcategory TEXT,
    metadata TEXT,
    video_summary_url TEXT,
    created_at TEXT,
    is_deleted INTEGER DEFAULT 0
)
"""

JOURNAL_SCHEMA = """
CREATE TABLE journal_entries (
    id INTEGER PRIMARY KEY,
    day TEXT UNIQUE,
    intentions TEXT,
    notes TEXT,
    goals TEXT,
    reflections TEXT,
    summary TEXT,
    status TEXT,
    created_at TEXT,
    updated_at TEXT
)
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config() -> dict:
    """Sample configuration for testing."""
    return {
        "db_path": "/tmp/dayflow/chunks.sqlite",
        "output_dir": "./dayflow-notes",
        "days": 7,
        "boundary_hour": 4,
        "include_deleted": False,
        "note_prefix": "Dayflow_"
    }


def make_card(id=1, start_ts=0, end_ts=1800, category="Work", title="Writing code",
              metadata=None, day="2024-12-19", **extra) -> ActivityRecord:
    """Build an ActivityRecord with sensible defaults."""
    if isinstance(metadata, dict):
        metadata = json.dumps(metadata)
    return ActivityRecord(
        id=id,
        batch_id=1,
        start=extra.pop("start", "9:00 AM"),
        end=extra.pop("end", "9:30 AM"),
        start_ts=start_ts,
        end_ts=end_ts,
        day=day,
        title=title,
        summary=extra.pop("summary", "Short summary"),
        category=category,
        metadata=metadata,
        **extra
    )


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture
def sample_cards() -> list[ActivityRecord]:
    """Three cards on 2024-12-19 with apps and a distraction."""
    return [
        make_card(
            id=1, start_ts=1734598800, end_ts=1734600600,
            start="9:00 AM", end="9:30 AM", category="Work", title="Writing code",
            metadata={
                "appSites": {"primary": "VS Code", "secondary": "Terminal"},
                "distractions": [
                    {"startTime": "9:10 AM", "endTime": "9:12 AM", "title": "Twitter",
                     "summary": "Scrolled the timeline"}
                ]
            }
        ),
        make_card(
            id=2, start_ts=1734600600, end_ts=1734603300,
            start="9:30 AM", end="10:15 AM", category="Work", title="Code review",
            metadata={"appSites": {"primary": "Chrome"}, "distractions": []}
        ),
        make_card(
            id=3, start_ts=1734603300, end_ts=1734604200,
            start="10:15 AM", end="10:30 AM", category="Personal", title="Coffee break",
            metadata=None
        ),
    ]


@pytest.fixture
def sample_journal() -> JournalRecord:
    return JournalRecord(
        id=1,
        day="2024-12-19",
        intentions="Ship the sync tool",
        goals="Finish tests",
        notes="Started early",
        reflections="Good focus today",
        summary="A productive day of coding.",
        status="complete",
        created_at="2024-12-19T08:00:00",
        updated_at="2024-12-19T22:00:00"
    )


def create_dayflow_db(path: Path, cards: list[dict] = (), journals: list[dict] = ()) -> Path:
    """Create a SQLite file shaped like Dayflow's chunks.sqlite."""
    conn = sqlite3.connect(path)
    conn.execute(CARDS_SCHEMA)
    conn.execute(JOURNAL_SCHEMA)
    for card in cards:
        columns = ", ".join(card)
        placeholders = ", ".join("?" for _ in card)
        conn.execute(f"INSERT INTO timeline_cards ({columns}) VALUES ({placeholders})",
                     tuple(card.values()))
    for journal in journals:
        columns = ", ".join(journal)
        placeholders = ", ".join("?" for _ in journal)
        conn.execute(f"INSERT INTO journal_entries ({columns}) VALUES ({placeholders})",
                     tuple(journal.values()))
    conn.commit()
    conn.close()
    return path


def card_row(id, day, start_ts, end_ts, category="Work", title="Focused work", **extra) -> dict:
    row = {
        "id": id,
        "batch_id": 1,
        "start": extra.pop("start", "9:00 AM"),
        "end": extra.pop("end", "10:00 AM"),
        "start_ts": start_ts,
        "end_ts": end_ts,
        "day": day,
        "title": title,
        "summary": "Summary",
        "category": category,
        "metadata": json.dumps({"appSites": {"primary": "VS Code"}, "distractions": []}),
        "created_at": "2024-12-19T10:00:00",
        "is_deleted": 0,
    }
    row.update(extra)
    return row


@pytest.fixture
def dayflow_db(temp_dir) -> Path:
    """Database with cards on 2024-12-18 and 2024-12-19 and one journal entry."""
    cards = [
        card_row(1, "2024-12-19", 1734616800, 1734620400, title="Morning work",
                 start="9:00 AM", end="10:00 AM"),
        card_row(2, "2024-12-19", 1734620400, 1734622200, category="Personal",
                 title="Lunch", start="10:00 AM", end="10:30 AM"),
        card_row(3, "2024-12-19", 1734622200, 1734622500, category="System",
                 title="Processing failed", start="10:30 AM", end="10:35 AM"),
        card_row(4, "2024-12-19", 1734622500, 1734624000, title="Deleted card",
                 is_deleted=1, start="10:35 AM", end="11:00 AM"),
        card_row(5, "2024-12-18", 1734530400, 1734534000, title="Yesterday",
                 start="9:00 AM", end="10:00 AM"),
    ]
    journals = [
        {"id": 1, "day": "2024-12-19", "intentions": "Ship it", "status": "complete",
         "created_at": "2024-12-19T08:00:00", "updated_at": "2024-12-19T22:00:00"},
    ]
    return create_dayflow_db(temp_dir / "chunks.sqlite", cards, journals)
