"""
Tests for sync_decision.py - Create/update/skip decisions.
"""
from datetime import datetime

import pytest

from schemas import SyncAction
from sync_decision import can_skip_before_fetch, decide_sync


COMPLETE_NOW = datetime(2024, 12, 21, 12, 0)   # 2024-12-19 is long over
INCOMPLETE_NOW = datetime(2024, 12, 20, 3, 0)  # still inside 2024-12-19
ORIGINAL_CREATED = "2024-12-19T09:00:00+00:00"


def test_complete_day_with_note_is_skipped():
    decision = decide_sync("2024-12-19", COMPLETE_NOW, note_exists=True, force=False,
                           has_any_data=True, existing_created_at=ORIGINAL_CREATED)

    assert decision.action == SyncAction.SKIP_COMPLETE
    assert decision.created_at is None
    assert not decision.writes


def test_complete_day_with_note_forced_is_updated_with_new_timestamp():
    decision = decide_sync("2024-12-19", COMPLETE_NOW, note_exists=True, force=True,
                           has_any_data=True, existing_created_at=ORIGINAL_CREATED)

    assert decision.action == SyncAction.UPDATE
    assert decision.created_at == COMPLETE_NOW.isoformat()
    assert not decision.preserve_created_at


def test_incomplete_day_with_note_is_updated_and_keeps_created_at():
    decision = decide_sync("2024-12-19", INCOMPLETE_NOW, note_exists=True, force=False,
                           has_any_data=True, existing_created_at=ORIGINAL_CREATED)

    assert decision.action == SyncAction.UPDATE
    assert decision.created_at == ORIGINAL_CREATED
    assert decision.preserve_created_at


def test_update_without_readable_created_at_uses_now():
    decision = decide_sync("2024-12-19", INCOMPLETE_NOW, note_exists=True, force=False,
                           has_any_data=True, existing_created_at=None)

    assert decision.action == SyncAction.UPDATE
    assert decision.created_at == INCOMPLETE_NOW.isoformat()
    assert not decision.preserve_created_at


def test_complete_day_without_note_is_created():
    decision = decide_sync("2024-12-19", COMPLETE_NOW, note_exists=False, force=False,
                           has_any_data=True)

    assert decision.action == SyncAction.CREATE
    assert decision.created_at == COMPLETE_NOW.isoformat()
    assert decision.writes


@pytest.mark.parametrize("force", [False, True])
@pytest.mark.parametrize("now", [COMPLETE_NOW, INCOMPLETE_NOW])
def test_no_data_is_skipped_empty(force, now):
    decision = decide_sync("2024-12-19", now, note_exists=False, force=force, has_any_data=False)
    assert decision.action == SyncAction.SKIP_EMPTY


def test_no_data_with_existing_incomplete_note_is_skipped_empty():
    decision = decide_sync("2024-12-19", INCOMPLETE_NOW, note_exists=True, force=False,
                           has_any_data=False, existing_created_at=ORIGINAL_CREATED)
    assert decision.action == SyncAction.SKIP_EMPTY


def test_skip_complete_wins_over_skip_empty():
    decision = decide_sync("2024-12-19", COMPLETE_NOW, note_exists=True, force=False,
                           has_any_data=False)
    assert decision.action == SyncAction.SKIP_COMPLETE


def test_respects_boundary_hour():
    now = datetime(2024, 12, 20, 5, 0)
    at_four = decide_sync("2024-12-19", now, True, False, True, ORIGINAL_CREATED, boundary_hour=4)
    at_six = decide_sync("2024-12-19", now, True, False, True, ORIGINAL_CREATED, boundary_hour=6)

    assert at_four.action == SyncAction.SKIP_COMPLETE
    assert at_six.action == SyncAction.UPDATE


def test_can_skip_before_fetch():
    assert can_skip_before_fetch("2024-12-19", COMPLETE_NOW, note_exists=True, force=False)
    assert not can_skip_before_fetch("2024-12-19", COMPLETE_NOW, note_exists=True, force=True)
    assert not can_skip_before_fetch("2024-12-19", COMPLETE_NOW, note_exists=False, force=False)
    assert not can_skip_before_fetch("2024-12-19", INCOMPLETE_NOW, note_exists=True, force=False)
