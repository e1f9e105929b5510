"""
Time parsing and timezone normalization.

EventBook treats all stored timestamps as timezone-aware datetimes so booking
exports can compare event times across API/CLI inputs without mixing naive and
aware values.
"""

from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse ISO-8601 datetime string and ensure tzinfo is present.

    Notes:
    - Accepts a trailing `Z` (UTC) and converts it to `+00:00` for `fromisoformat`.
    - A bare date (`2023-05-01`) is read as midnight.
    - If the parsed value is naive, the provided `timezone` is attached.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_tz(dt, timezone)


def parse_date(value: str) -> date:
    """Parse `YYYY-MM-DD` (or a full ISO datetime, keeping only its date)."""
    value = value.strip()
    if len(value) == 10:
        return date.fromisoformat(value)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value).date()


def at_time_of_day(day: date, time_of_day: time | None, timezone: str) -> datetime:
    """Combine a calendar day with a time of day (midnight when omitted)."""
    return ensure_tz(datetime.combine(day, time_of_day or time(0, 0)), timezone)
