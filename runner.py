#!/usr/bin/env python3
"""
Sync runner - exports Dayflow timeline data to daily markdown notes.

Opens Dayflow's database read-only, walks the lookback window newest day
first and creates, updates or skips one note per logical day.

Usage:
    python runner.py                    # Sync the last 7 days
    python runner.py --days 30          # Sync the last 30 days
    python runner.py --force            # Regenerate every note
    python runner.py --db path/to/chunks.sqlite --output ~/vault/Dayflow
"""
import argparse
import sys
from datetime import datetime
from typing import Optional

from aggregate import aggregate_day
from config import MAX_DAYS, SyncConfig, build_sync_config, load_config, validate_config
from database import (
    DatabaseNotFoundError,
    DatabaseOpenError,
    fetch_cards_for_day,
    fetch_journal_for_day,
    open_database
)
from day_boundary import boundary_label, list_days
from markdown_note import build_frontmatter, generate_day_note
from note_store import NoteWriteError, note_exists, note_filename, read_created_at, write_note
from schemas import ActivityRecord, SyncAction, SyncStats
from sync_decision import can_skip_before_fetch, decide_sync

__version__ = "1.0.0"

FAILED_TITLE_MARKERS = ("Processing failed", "Error")


def is_failed_card(card: ActivityRecord) -> bool:
    """System cards left behind when Dayflow failed to process a batch."""
    if card.category != "System":
        return False
    title = card.title or ""
    return any(marker in title for marker in FAILED_TITLE_MARKERS) or card.subcategory == "Error"


def sync_day(conn, day: str, config: SyncConfig, now: datetime) -> SyncAction:
    """
    Sync one logical day and return what was done.

    Raises on fetch/render problems; the caller decides whether that is fatal.
    """
    prefix = config.note_prefix
    exists = note_exists(day, config.output_dir, prefix)

    if can_skip_before_fetch(day, now, exists, config.force, config.boundary_hour):
        print("  ⊘ Skipped (day complete, note exists)")
        return SyncAction.SKIP_COMPLETE

    all_cards = fetch_cards_for_day(conn, day, config.include_deleted)
    cards = [card for card in all_cards if not is_failed_card(card)]

    filtered = len(all_cards) - len(cards)
    if filtered > 0:
        print(f"  ℹ Filtered out {filtered} failed processing card(s)")

    journal = fetch_journal_for_day(conn, day)

    existing_created_at = None
    if exists and not config.force:
        existing_created_at = read_created_at(day, config.output_dir, prefix)

    decision = decide_sync(
        day, now, exists, config.force,
        has_any_data=bool(cards) or journal is not None,
        existing_created_at=existing_created_at,
        boundary_hour=config.boundary_hour
    )

    if not decision.writes:
        print("  ⊘ Skipped (no data for this day)")
        return decision.action

    aggregate = aggregate_day(cards)
    for warning in aggregate.warnings:
        print(f"  ⚠ {warning}")

    frontmatter = build_frontmatter(
        day, cards, journal, aggregate,
        boundary=boundary_label(config.boundary_hour),
        created_at=decision.created_at,
        updated_at=now.isoformat()
    )
    content = generate_day_note(day, cards, journal, aggregate, frontmatter)
    write_note(day, content, config.output_dir, prefix)

    verb = "Updated" if decision.action == SyncAction.UPDATE else "Created"
    print(f"  ✓ {verb}: {note_filename(day, prefix)} ({len(cards)} cards)")
    return decision.action


def run_sync(config: SyncConfig, now: Optional[datetime] = None) -> SyncStats:
    """
    Run a sync over the configured lookback window.

    A failure on one day is reported and counted as skipped; the remaining
    days still run. Database and write errors are raised to the caller.

    Args:
        config: Settings for this run
        now: Reference instant (defaults to the naive local wall-clock time,
            so boundaries follow the local clock across DST changes)

    Returns:
        SyncStats with created/updated/skipped counts
    """
    if now is None:
        now = datetime.now()

    print("Configuration:")
    print(f"  Database: {config.db_path}")
    print(f"  Output: {config.output_dir}")
    print(f"  Days to sync: {config.days}")
    print(f"  Day boundary: {boundary_label(config.boundary_hour)}")
    print(f"  Force regenerate: {'Yes' if config.force else 'No'}\n")

    print("Opening Dayflow database...")
    conn = open_database(config.db_path)
    print("✓ Database connected (read-only mode)\n")

    stats = SyncStats()
    try:
        days = list_days(config.days, now, config.boundary_hour)
        stats.total_days = len(days)
        print(f"Syncing {len(days)} days: {days[0]} to {days[-1]}\n")

        try:
            config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise NoteWriteError(config.output_dir, e) from e

        for day in days:
            print(f"Processing {day}...")
            try:
                action = sync_day(conn, day, config, now)
            except NoteWriteError:
                raise
            except Exception as e:
                print(f"  ✗ Error: {e}")
                stats.skipped += 1
                stats.errors.append(f"{day}: {e}")
                continue

            if action == SyncAction.CREATE:
                stats.created += 1
            elif action == SyncAction.UPDATE:
                stats.updated += 1
            else:
                stats.skipped += 1
    finally:
        conn.close()

    print()
    print("=" * 50)
    print("SYNC COMPLETE")
    print("=" * 50)
    print(f"New notes:     {stats.created}")
    print(f"Updated notes: {stats.updated}")
    print(f"Skipped:       {stats.skipped}")
    print(f"Total days:    {stats.total_days}")
    print(f"\nOutput directory: {config.output_dir}\n")

    return stats


# =============================================================================
# FATAL DIAGNOSTICS
# =============================================================================

def report_platform_error() -> None:
    print("\n❌ Dayflow is a macOS-only application\n", file=sys.stderr)
    print("This sync tool requires:", file=sys.stderr)
    print("  • macOS operating system", file=sys.stderr)
    print("  • Dayflow app installed from https://dayflow.space", file=sys.stderr)
    print("  • Dayflow database at ~/Library/Application Support/Dayflow/\n", file=sys.stderr)
    print("To read a copied database elsewhere, pass --db <path>.\n", file=sys.stderr)


def report_missing_database(error: DatabaseNotFoundError) -> None:
    print("\n❌ Dayflow database not found!\n", file=sys.stderr)
    print("Expected location:", file=sys.stderr)
    print(f"  {error.path}\n", file=sys.stderr)
    print("Possible solutions:", file=sys.stderr)
    print("  1. Install Dayflow from https://dayflow.space", file=sys.stderr)
    print("  2. Open Dayflow and let it record for a few minutes", file=sys.stderr)
    print("  3. Verify Dayflow is tracking your activity", file=sys.stderr)
    print("  4. Specify custom path with --db flag\n", file=sys.stderr)
    print("Example:", file=sys.stderr)
    print("  dayflow-sync --db ~/path/to/chunks.sqlite\n", file=sys.stderr)


def report_open_error(error: DatabaseOpenError) -> None:
    print("\n❌ Failed to open Dayflow database\n", file=sys.stderr)
    print(f"Error: {error.cause}\n", file=sys.stderr)
    print("Possible causes:", file=sys.stderr)
    print("  • Database is corrupted", file=sys.stderr)
    print("  • Insufficient read permissions", file=sys.stderr)
    print("  • Database format has changed\n", file=sys.stderr)


def report_write_error(error: NoteWriteError) -> None:
    print("\n❌ Failed to save note\n", file=sys.stderr)
    print(f"File: {error.path.name}", file=sys.stderr)
    print(f"Error: {error.cause}\n", file=sys.stderr)
    print("Possible causes:", file=sys.stderr)
    print("  • Insufficient write permissions", file=sys.stderr)
    print("  • Disk space full", file=sys.stderr)
    print("  • Invalid output directory path\n", file=sys.stderr)
    print(f"Directory: {error.path.parent}\n", file=sys.stderr)


# =============================================================================
# CLI INTERFACE
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dayflow-sync",
        description="Export Dayflow timeline data to markdown notes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dayflow-sync                        Sync the last 7 days
  dayflow-sync --days 30              Sync the last 30 days
  dayflow-sync --force                Regenerate all notes, including complete days
  dayflow-sync --db ./chunks.sqlite   Use a custom database location

Environment:
  DAYFLOW_DB_PATH, DAYFLOW_OUTPUT_DIR override config.json
        """
    )

    parser.add_argument('-d', '--days', type=int, metavar='N',
                        help=f'Number of days to sync (1-{MAX_DAYS}, default 7)')
    parser.add_argument('-o', '--output', type=str, metavar='PATH',
                        help='Output directory path (default: ./dayflow-notes)')
    parser.add_argument('--db', type=str, metavar='PATH',
                        help='Custom Dayflow database path (overrides default location)')
    parser.add_argument('--include-deleted', action='store_true',
                        help='Include deleted timeline cards')
    parser.add_argument('-f', '--force', action='store_true',
                        help='Force regenerate all notes, including complete days')
    parser.add_argument('--boundary-hour', type=int, metavar='H',
                        help='Hour a Dayflow day starts at (0-23, default 4)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: list[str] = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config()
    if args.days is not None:
        config["days"] = args.days
    if args.boundary_hour is not None:
        config["boundary_hour"] = args.boundary_hour
    if args.include_deleted:
        config["include_deleted"] = True

    is_valid, error = validate_config(config)
    if not is_valid:
        print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    sync_config = build_sync_config(config, db=args.db, output=args.output, force=args.force)

    if not sync_config.custom_db and sys.platform != "darwin":
        report_platform_error()
        return 1

    print("┌─────────────────────────────────────────────┐")
    print("│  Dayflow Sync - Export to Markdown          │")
    print("└─────────────────────────────────────────────┘\n")

    try:
        stats = run_sync(sync_config)
    except DatabaseNotFoundError as e:
        report_missing_database(e)
        return 1
    except DatabaseOpenError as e:
        report_open_error(e)
        return 1
    except NoteWriteError as e:
        report_write_error(e)
        return 1

    if stats.errors:
        print(f"Errors: {stats.errors[:5]}")
        if len(stats.errors) > 5:
            print(f"  ... and {len(stats.errors) - 5} more")
    return 0


if __name__ == "__main__":
    sys.exit(main())
