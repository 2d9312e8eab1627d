"""Datetime helpers for transit windows and sampling grids.

All engine moments are timezone-aware UTC datetimes. Naive datetimes are
interpreted as UTC rather than local time.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional


def ensure_utc(moment: datetime) -> datetime:
    """Return `moment` as an aware UTC datetime."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Default engine clock."""
    return datetime.now(timezone.utc)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime string into an aware UTC datetime.

    Accepts 'YYYY-MM-DD' (midnight UTC) and full ISO timestamps, including a
    trailing 'Z'. Returns None for None or an empty string.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date format: {value!r}. Expected ISO-8601 (YYYY-MM-DD).")
    return ensure_utc(parsed)


def start_of_day(moment: datetime) -> datetime:
    """00:00:00.000 on the moment's calendar day."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    """Last microsecond (23:59:59.999999) of the moment's calendar day."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def day_window(exact: datetime, duration_days: float) -> tuple[datetime, datetime]:
    """Window around an exact moment, widened to whole days.

    The start is floored to midnight and moved back floor(duration) days;
    the end is ceiled to the last microsecond of its day and moved forward
    ceil(duration) days.

    Example:
        day_window(2025-01-15T12:00Z, 0.5) -> (2025-01-15T00:00Z, 2025-01-16T23:59:59.999999Z)
    """
    start = start_of_day(exact) - timedelta(days=math.floor(duration_days))
    end = end_of_day(exact) + timedelta(days=math.ceil(duration_days))
    return start, end


def sample_grid(start: datetime, end: datetime, steps: int) -> list[datetime]:
    """`steps + 1` evenly spaced moments covering [start, end] inclusive."""
    if steps < 1:
        return [start]
    step = (end - start) / steps
    return [start + step * i for i in range(steps + 1)]


def daily_moments(start: datetime, end: datetime) -> list[datetime]:
    """`start`, `start + 1 day`, ... up to `end`, with `end` itself always last."""
    moments = []
    current = start
    while current < end:
        moments.append(current)
        current += timedelta(days=1)
    moments.append(end)
    return moments
