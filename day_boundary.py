"""
Day boundary resolution.

Dayflow considers a "day" to run from the boundary hour (4:00 AM by default)
to just before the boundary hour on the next calendar day, so late-night
activity is grouped with the working day it belongs to.

All instants are local wall-clock datetimes. Aware datetimes are supported;
the boundary instant takes the tzinfo of the instant it is compared with.
"""
from datetime import date, datetime, time, timedelta

from schemas import DayWindow

DEFAULT_BOUNDARY_HOUR = 4
DAY_FORMAT = "%Y-%m-%d"


def boundary_for(day: date, boundary_hour: int = DEFAULT_BOUNDARY_HOUR, tzinfo=None) -> datetime:
    """Boundary instant that starts logical day `day`."""
    return datetime.combine(day, time(boundary_hour), tzinfo=tzinfo)


def resolve_day(instant: datetime, boundary_hour: int = DEFAULT_BOUNDARY_HOUR) -> DayWindow:
    """
    Map an instant to its logical day.

    An instant before the boundary hour belongs to the previous calendar date.
    An instant exactly at the boundary starts a new day.

    Example:
        resolve_day(datetime(2024, 12, 20, 2, 0)).day == "2024-12-19"
    """
    boundary_today = instant.replace(hour=boundary_hour, minute=0, second=0, microsecond=0)

    if instant < boundary_today:
        start = boundary_today - timedelta(days=1)
        return DayWindow(day=start.strftime(DAY_FORMAT), start=start, end=boundary_today)

    return DayWindow(
        day=boundary_today.strftime(DAY_FORMAT),
        start=boundary_today,
        end=boundary_today + timedelta(days=1),
    )


def list_days(lookback_count: int, reference: datetime,
              boundary_hour: int = DEFAULT_BOUNDARY_HOUR) -> list[str]:
    """
    Logical days covered by a lookback window, newest first.

    Each of the `lookback_count` offsets (reference minus 0, 1, 2... days) is
    resolved independently, so neighbouring offsets can land on the same
    logical day; duplicates are dropped keeping first-seen order. The caller
    bounds `lookback_count`.
    """
    days = []
    seen = set()
    for i in range(lookback_count):
        day = resolve_day(reference - timedelta(days=i), boundary_hour).day
        if day not in seen:
            seen.add(day)
            days.append(day)
    return days


def parse_day(day: str) -> date:
    return datetime.strptime(day, DAY_FORMAT).date()


def day_is_complete(day: str, now: datetime, boundary_hour: int = DEFAULT_BOUNDARY_HOUR) -> bool:
    """True once `now` has reached the boundary that starts the following day."""
    next_boundary = boundary_for(parse_day(day) + timedelta(days=1), boundary_hour, tzinfo=now.tzinfo)
    return now >= next_boundary


def boundary_label(boundary_hour: int = DEFAULT_BOUNDARY_HOUR) -> str:
    """Short label for the frontmatter, e.g. 4 -> '4am', 0 -> '12am', 17 -> '5pm'."""
    suffix = "am" if boundary_hour < 12 else "pm"
    hour = boundary_hour % 12 or 12
    return f"{hour}{suffix}"


def format_day_heading(day: str) -> str:
    """'2024-12-19' -> 'December 19, 2024'."""
    d = parse_day(day)
    return f"{d.strftime('%B')} {d.day}, {d.year}"
