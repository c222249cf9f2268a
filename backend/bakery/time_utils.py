from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def day_bounds(value: Optional[str] = None) -> tuple[datetime, datetime]:
    """
    Half-open [start, end) range covering one UTC calendar day.

    value is "YYYY-MM-DD"; None or "" means today. Raises ValueError on bad input.
    """
    if value:
        day = date.fromisoformat(value.strip())
    else:
        day = utcnow().date()
    start = datetime(day.year, day.month, day.day)
    return start, start + timedelta(days=1)


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
