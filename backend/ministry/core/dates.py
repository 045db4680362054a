"""Date Helpers — timezone normalization and calendar arithmetic for pure core functions.

Invariants:
    - Every datetime leaving this module is timezone-aware UTC
    - Naive datetimes are interpreted as UTC (SQLite drops tzinfo on read)

Design Decisions:
    - Explicit `now` parameters everywhere in core/: callers inject the clock, tests pin it
"""

from datetime import date, datetime, timedelta, timezone

WEEKDAYS: tuple[str, ...] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from earlier to later (floor)."""
    return (ensure_utc(later) - ensure_utc(earlier)) // timedelta(days=1)


def month_key(value: datetime | date) -> str:
    """YYYY-MM bucket key."""
    return f"{value.year:04d}-{value.month:02d}"


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    """(year, month) shifted by offset months. month is 1-based."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def weekday_name(value: datetime | date) -> str:
    return WEEKDAYS[value.weekday()]
