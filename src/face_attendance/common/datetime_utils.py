from __future__ import annotations

import math
from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into naive local time; a trailing ``Z`` is accepted."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return as_local_naive(datetime.fromisoformat(v))


def as_local_naive(value: datetime) -> datetime:
    """Policy cutoffs are naive local times, so offset-aware instants are converted to match."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip()[:5], "%H:%M").time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def at_time(day: date, t: time) -> datetime:
    return datetime.combine(day, t)


def whole_minutes(start: datetime, end: datetime) -> int:
    """Completed minutes between two instants, never negative."""
    return max(int((end - start).total_seconds() // 60), 0)


def minutes_past(reference: datetime, moment: datetime) -> int:
    """Minutes ``moment`` is after ``reference``, a started minute counting as one."""
    seconds = (moment - reference).total_seconds()
    if seconds <= 0:
        return 0
    return int(math.ceil(seconds / 60))
