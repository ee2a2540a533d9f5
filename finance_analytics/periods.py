"""Calendar arithmetic shared by every report.

All ranges are inclusive at day granularity: a range starts at 00:00:00 of
its first day and ends at 23:59:59.999 of its last day.
"""

import logging
from calendar import monthrange
from datetime import date, datetime, time, timedelta
from typing import Iterator, NamedTuple, Optional

import pandas as pd

from finance_analytics.constants import DAILY, MONTHLY, WEEKLY, WEEKDAYS

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59, 999000)
GRANULARITIES = (DAILY, WEEKLY, MONTHLY)


class Period(NamedTuple):
    start: date
    end: date
    key: str
    label: str


def parse_date(value) -> Optional[datetime]:
    """Parse an ISO date or datetime; None when the value is missing or malformed."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        logger.debug("Ignoring unparseable date %r", value)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.to_pydatetime()


def parse_day(value) -> Optional[date]:
    parsed = parse_date(value)
    return parsed.date() if parsed is not None else None


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


def days_between(start: date, end: date) -> int:
    return (end - start).days


def end_of_month(day: date) -> date:
    return day.replace(day=monthrange(day.year, day.month)[1])


def add_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


def shift_years(day: date, years: int) -> date:
    year = day.year + years
    return date(year, day.month, min(day.day, monthrange(year, day.month)[1]))


def weekday_name(day: date) -> str:
    # date.weekday() is Monday=0, WEEKDAYS is Sunday-first
    return WEEKDAYS[(day.weekday() + 1) % 7]


def iso(day: date) -> str:
    return day.isoformat()


def day_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def month_key(day: date) -> str:
    return f"{day:%Y-%m}"


def month_label(day: date) -> str:
    return f"{day:%b %Y}"


def _bucket_end(cursor: date, granularity: str) -> date:
    if granularity == DAILY:
        return cursor
    if granularity == WEEKLY:
        return cursor + timedelta(days=6)
    return end_of_month(cursor)


def _describe(start: date, end: date, granularity: str) -> tuple[str, str]:
    if granularity == DAILY:
        return iso(start), day_label(start)
    if granularity == WEEKLY:
        return f"{iso(start)}_{iso(end)}", f"{day_label(start)} - {day_label(end)}"
    return month_key(start), month_label(start)


def iter_periods(start, end, granularity: str) -> Iterator[Period]:
    """Yield gapless, non-overlapping periods covering exactly [start, end].

    Each bucket ends on the same day (daily), six days later (weekly) or on
    the last day of its calendar month (monthly), clamped to ``end``. The next
    bucket starts the day after.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity {granularity!r}, expected one of {GRANULARITIES}")

    first, last = parse_day(start), parse_day(end)
    if first is None or last is None:
        return

    cursor = first
    while cursor <= last:
        bucket_end = min(_bucket_end(cursor, granularity), last)
        key, label = _describe(cursor, bucket_end, granularity)
        yield Period(cursor, bucket_end, key, label)
        cursor = bucket_end + timedelta(days=1)