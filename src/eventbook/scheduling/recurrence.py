"""
Recurring-event date expansion.

Given a date range, a recurrence type and one or more selectors, produce the
calendar dates an event occurs on. Pure function; the events service turns each
returned date into a stored event.

Selector meaning by recurrence type:
- `daily`: ignored; every day matches once per selector
- `weekly`: weekday index, 0 = Sunday ... 6 = Saturday
- `monthly`: day of month, 1..31 (months without that day are skipped, no rollover)

Every selector is checked against every day, so several selectors matching the
same day (or any multi-selector `daily` request) emit that date more than once.
Pass `dedupe=True` to collapse repeats.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal, get_args

RecurrenceType = Literal["daily", "weekly", "monthly"]
RECURRENCE_TYPES: tuple[str, ...] = get_args(RecurrenceType)


def normalize_frequency(value: int | str | Sequence[int | str]) -> tuple[int, ...]:
    """Coerce a scalar selector or a sequence of selectors into a tuple of ints.

    Raises:
        ValueError: If a selector is not an integer (or an integer-looking string).
    """
    if isinstance(value, (int, str)):
        items: Sequence[int | str] = [value]
    else:
        items = value

    out: list[int] = []
    for item in items:
        if isinstance(item, bool):
            raise ValueError(f"Invalid frequency selector: {item!r}")
        if isinstance(item, int):
            out.append(item)
            continue
        text = str(item).strip()
        try:
            out.append(int(text))
        except ValueError:
            raise ValueError(f"Invalid frequency selector: {item!r}") from None
    return tuple(out)


@dataclass(frozen=True)
class RecurrenceRequest:
    start_date: date
    end_date: date
    recurrence_type: RecurrenceType
    frequency: tuple[int, ...]

    def __post_init__(self) -> None:
        if self.recurrence_type not in RECURRENCE_TYPES:
            raise ValueError(f"Unknown recurrence_type: {self.recurrence_type!r}")
        object.__setattr__(self, "frequency", normalize_frequency(self.frequency))


def weekday_index(day: date) -> int:
    """Return 0 for Sunday through 6 for Saturday."""
    return day.isoweekday() % 7


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each day in `[start, end]`; nothing when `start > end`."""
    current = start
    step = timedelta(days=1)
    while current <= end:
        yield current
        current += step


def _matches(day: date, recurrence_type: RecurrenceType, selector: int) -> bool:
    if recurrence_type == "daily":
        return True
    if recurrence_type == "weekly":
        return weekday_index(day) == selector
    return day.day == selector


def expand(request: RecurrenceRequest, *, dedupe: bool = False) -> list[date]:
    """Return the occurrence dates for `request` in chronological order."""
    dates: list[date] = []
    for day in iter_days(request.start_date, request.end_date):
        for selector in request.frequency:
            if not _matches(day, request.recurrence_type, selector):
                continue
            if dedupe and dates and dates[-1] == day:
                continue
            dates.append(day)
    return dates
