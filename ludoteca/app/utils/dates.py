"""
ludoteca/app/utils/dates.py

Date helpers shared by the slot schemas, repository and aggregator.

The backend sends ISO strings that already represent venue-local time
(Europe/Madrid). Older records carry a trailing "Z" or an offset; it is
dropped WITHOUT converting, so "2026-01-05T09:00:00.000Z" is 09:00 local.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterator

TZ_SUFFIX_RE = re.compile(r"(Z|[+-]\d{2}:?\d{2})$")


def parse_api_datetime(value: str | datetime) -> datetime:
    """Parse an API datetime as naive local time."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())

    text = str(value).strip()
    if "T" in text or " " in text:
        text = TZ_SUFFIX_RE.sub("", text)
    return datetime.fromisoformat(text)


def parse_api_date(value: str | date | datetime) -> date:
    """Parse "YYYY-MM-DD" or a full ISO datetime into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if len(text) > 10:
        return parse_api_datetime(text).date()
    return date.fromisoformat(text)


def to_api_date(value: date) -> str:
    """"YYYY-MM-DD" for query parameters and payloads."""
    return value.strftime("%Y-%m-%d")


def to_api_datetime(value: datetime) -> str:
    """Local ISO without timezone, e.g. "2026-01-05T09:00:00.000"."""
    return value.replace(tzinfo=None).isoformat(timespec="milliseconds")


def month_key(year: int, month: int) -> str:
    """"2024-07"; month is 1..12."""
    return f"{year:04d}-{month:02d}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def add_months(value: date, months: int) -> date:
    """First day of the month `months` away from value's month."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def iter_months(start: date, end: date) -> Iterator[tuple[int, int]]:
    """(year, month) pairs from start's month to end's month, inclusive."""
    current = date(start.year, start.month, 1)
    last = date(end.year, end.month, 1)
    while current <= last:
        yield current.year, current.month
        current = add_months(current, 1)


def week_start(value: date) -> date:
    """Monday of value's week."""
    return value - timedelta(days=value.weekday())


def weeks_in_month(year: int, month: int) -> list[tuple[date, date]]:
    """
    Monday-start weeks overlapping the month.

    The first week may start in the previous month and the last may end in
    the next one.
    """
    first, last = month_bounds(year, month)
    weeks = []
    current = week_start(first)
    while current <= last:
        weeks.append((current, current + timedelta(days=6)))
        current += timedelta(days=7)
    return weeks
