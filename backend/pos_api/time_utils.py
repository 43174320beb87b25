from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return utcnow().date()


def parse_calendar_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a ``YYYY-MM-DD`` calendar date.

    - None / "" -> None
    - anything carrying a time component is rejected with ValueError
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if len(s) != 10:
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    return datetime.strptime(s, "%Y-%m-%d").date()


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """
    Half-open UTC-naive datetime window [start 00:00, end+1 00:00) covering
    both calendar dates inclusively.
    """
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end + timedelta(days=1), time.min)
    return lower, upper


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
