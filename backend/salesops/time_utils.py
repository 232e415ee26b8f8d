from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Optional

SECONDS_PER_DAY = 60 * 60 * 24


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DD" or "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    # Normalize to UTC-naive
    if dt.tzinfo is None:
        # interpret naive as UTC
        return dt.replace(tzinfo=None)

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _calendar_day(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def start_of_day(value: date) -> datetime:
    """00:00:00.000 of the calendar day."""
    return datetime.combine(_calendar_day(value), time.min)


def end_of_day(value: date) -> datetime:
    """23:59:59.999 of the calendar day (millisecond precision)."""
    return datetime.combine(_calendar_day(value), time(23, 59, 59, 999000))


def days_since(moment: Optional[datetime], as_of: datetime, *, floor: bool = False) -> Optional[int]:
    """Whole days between moment and as_of; rounded unless floor is set."""
    if moment is None:
        return None
    delta = (as_of - moment).total_seconds() / SECONDS_PER_DAY
    if floor:
        return math.floor(delta)
    return int(round(delta))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
