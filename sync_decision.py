"""
Per-day sync decision.

A day's note can still change until the day's boundary window has fully
elapsed, so only complete days with an existing note are skipped. The
decision is a pure function of its inputs and never raises.

Rules, first match wins:

    not force and note exists and day complete  -> skip-complete
    no cards and no journal                     -> skip-empty
    note exists                                 -> update (keep created_at unless force)
    otherwise                                   -> create (created_at = now)
"""
from datetime import datetime
from typing import Optional

from day_boundary import DEFAULT_BOUNDARY_HOUR, day_is_complete
from schemas import SyncAction, SyncDecision


def can_skip_before_fetch(day: str, now: datetime, note_exists: bool, force: bool,
                          boundary_hour: int = DEFAULT_BOUNDARY_HOUR) -> bool:
    """First rule only: lets the runner skip a day without touching the database."""
    return not force and note_exists and day_is_complete(day, now, boundary_hour)


def decide_sync(day: str, now: datetime, note_exists: bool, force: bool,
                has_any_data: bool, existing_created_at: Optional[str] = None,
                boundary_hour: int = DEFAULT_BOUNDARY_HOUR) -> SyncDecision:
    """
    Decide what to do with `day`'s note.

    `existing_created_at` is the created_at read back from the existing note;
    when it is missing (or the run is forced) an update gets a fresh one.
    """
    if can_skip_before_fetch(day, now, note_exists, force, boundary_hour):
        return SyncDecision(action=SyncAction.SKIP_COMPLETE)

    if not has_any_data:
        return SyncDecision(action=SyncAction.SKIP_EMPTY)

    now_iso = now.isoformat()

    if note_exists:
        preserve = not force and bool(existing_created_at)
        return SyncDecision(
            action=SyncAction.UPDATE,
            created_at=existing_created_at if preserve else now_iso,
            preserve_created_at=preserve
        )

    return SyncDecision(action=SyncAction.CREATE, created_at=now_iso)
