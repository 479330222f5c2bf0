from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def is_weekday(day: date) -> bool:
    return day.weekday() < 5


def count_weekdays(start: date, end: date) -> int:
    """Mon-Fri days in [start, end]; 0 when the range is empty."""
    count = 0
    current = start
    while current <= end:
        if is_weekday(current):
            count += 1
        current += timedelta(days=1)
    return count
