"""
Pydantic schemas for Dayflow records, day aggregates and sync results.

These schemas are used both for:
1. Validating rows read from Dayflow's SQLite database
2. Passing typed values between the resolver, aggregator, decision engine and renderer
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# SOURCE RECORDS (from database.py)
# =============================================================================

class Distraction(BaseModel):
    """A distraction nested inside a timeline card's metadata."""
    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(default="", alias="startTime")
    end_time: str = Field(default="", alias="endTime")
    title: str = Field(default="")
    summary: Optional[str] = None

    @field_validator("start_time", "end_time", "title", mode="before")
    @classmethod
    def _text_or_empty(cls, value):
        return "" if value is None else str(value)

    @field_validator("summary", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return None if value is None else str(value)


class AppSites(BaseModel):
    """Primary/secondary application slots of a timeline card."""
    primary: Optional[str] = None
    secondary: Optional[str] = None

    @field_validator("primary", "secondary", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return None if value is None else str(value)


class CardMetadata(BaseModel):
    """
    Parsed form of the card's opaque metadata JSON.

    Each field is read on its own: a distraction list or appSites entry of
    the wrong type becomes empty without discarding the other field.
    """
    model_config = ConfigDict(populate_by_name=True)

    distractions: list[Distraction] = Field(default_factory=list)
    app_sites: AppSites = Field(default_factory=AppSites, alias="appSites")

    @field_validator("distractions", mode="before")
    @classmethod
    def _distraction_list(cls, value):
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("app_sites", mode="before")
    @classmethod
    def _app_sites_object(cls, value):
        return value if isinstance(value, dict) else {}


class ActivityRecord(BaseModel):
    """One timeline card: an observed interval of activity."""
    id: int
    batch_id: Optional[int] = None
    start: str = Field(default="", description="Display start, e.g. '9:00 AM'")
    end: str = Field(default="", description="Display end")
    start_ts: int = Field(description="Start instant, seconds")
    end_ts: int = Field(description="End instant, seconds")
    day: str
    title: Optional[str] = None
    summary: Optional[str] = None
    detailed_summary: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    metadata: Optional[str] = Field(default=None, description="Raw metadata JSON")
    video_summary_url: Optional[str] = None
    created_at: Optional[str | int] = None
    is_deleted: bool = False

    @model_validator(mode="after")
    def _check_interval(self):
        if self.end_ts < self.start_ts:
            raise ValueError(f"card {self.id}: end_ts {self.end_ts} is before start_ts {self.start_ts}")
        return self


class JournalRecord(BaseModel):
    """The journal entry for one logical day."""
    id: int
    day: str
    intentions: Optional[str] = None
    notes: Optional[str] = None
    goals: Optional[str] = None
    reflections: Optional[str] = None
    summary: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str | int] = None
    updated_at: Optional[str | int] = None


# =============================================================================
# DAY BOUNDARY SCHEMAS (from day_boundary.py)
# =============================================================================

class DayWindow(BaseModel):
    """A logical day and its half-open interval [start, end)."""
    day: str = Field(description="Logical day identifier, YYYY-MM-DD")
    start: datetime
    end: datetime


# =============================================================================
# AGGREGATION SCHEMAS (from aggregate.py)
# =============================================================================

class CategoryShare(BaseModel):
    """Minutes and rounded percentage share of one category."""
    category: str
    minutes: int
    percent: int


class AppUsage(BaseModel):
    """Sessions and minutes attributed to one application."""
    app: str
    sessions: int = 0
    total_minutes: int = 0


class AnnotatedDistraction(Distraction):
    """A distraction carrying its parent card's display interval."""
    card_start: str
    card_end: str


class DayAggregate(BaseModel):
    """Everything derived from a day's cards."""
    total_minutes: int = 0
    categories: list[str] = Field(default_factory=list)
    category_breakdown: list[CategoryShare] = Field(default_factory=list)
    app_usage: list[AppUsage] = Field(default_factory=list)
    distractions: list[AnnotatedDistraction] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# SYNC SCHEMAS (from sync_decision.py, markdown_note.py, runner.py)
# =============================================================================

class SyncAction(str, Enum):
    SKIP_COMPLETE = "skip-complete"
    SKIP_EMPTY = "skip-empty"
    CREATE = "create"
    UPDATE = "update"


class SyncDecision(BaseModel):
    """What to do with one day's note."""
    action: SyncAction
    created_at: Optional[str] = Field(
        default=None, description="created_at to write; None when skipping"
    )
    preserve_created_at: bool = False

    @property
    def writes(self) -> bool:
        return self.action in (SyncAction.CREATE, SyncAction.UPDATE)


class NoteFrontmatter(BaseModel):
    """Machine-readable block written at the top of every note."""
    dayflow_day: str
    day_boundary: str
    total_cards: int
    total_minutes: int
    categories: list[str] = Field(default_factory=list)
    has_journal: bool = False
    journal_status: Optional[str] = None
    created_at: str
    updated_at: str
    tags: list[str] = Field(default_factory=list)


class SyncStats(BaseModel):
    """Counts reported at the end of a run."""
    created: int = 0
    updated: int = 0
    skipped: int = 0
    total_days: int = 0
    errors: list[str] = Field(default_factory=list, description="'<day>: <message>' entries")
