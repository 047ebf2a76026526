"""
Calendar helpers for the ledger.

All ledger dates are naive calendar days. "Today" always comes from a
Clock so that tests (and the recurring engine) can pin it.

Monthly arithmetic policy: adding months keeps the anchor day-of-month
and clamps to the last day of shorter months (Jan 31 + 1 month is
Feb 28/29, and the following month returns to the 31st). Days never roll
over into the next month.
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional, Union


DayLike = Union[date, str]


class Clock:
    """Source of the current instant and the current local calendar day."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return date.today()


SYSTEM_CLOCK = Clock()


def as_day(value: DayLike) -> date:
    """Accept a date or an ISO `YYYY-MM-DD` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(day: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Move a date by whole calendar months.

    Args:
        day: Starting date
        months: Months to add (may be negative)
        anchor_day: Day-of-month to aim for; defaults to `day.day`.
            Passing the series' first day keeps a Jan 31 series on
            the last day of each month instead of drifting to the 28th.
    """
    target_day = anchor_day or day.day
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(target_day, days_in_month(year, month)))


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_date_range(today: date) -> tuple[date, date]:
    """Sunday..Saturday week containing `today`."""
    days_since_sunday = (today.weekday() + 1) % 7
    start = today - timedelta(days=days_since_sunday)
    return start, start + timedelta(days=6)


def month_date_range(month_offset: int, today: date) -> tuple[date, date]:
    """First and last day of the month `month_offset` months from today's."""
    first = add_months(today.replace(day=1), month_offset)
    last = first.replace(day=days_in_month(first.year, first.month))
    return first, last
