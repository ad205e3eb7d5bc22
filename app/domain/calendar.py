"""Day-count and interval primitives shared by the billing engine.

All intervals are closed: both endpoints count as occupied days.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

QUARTER_MONTHS: dict[str, range] = {
    "All": range(0, 12),
    "Q1": range(0, 3),
    "Q2": range(3, 6),
    "Q3": range(6, 9),
    "Q4": range(9, 12),
}


def days_between_inclusive(start: date, end: date) -> int:
    """Number of calendar days from start to end, counting both ends.

    Order does not matter; a same-day interval is one day.
    """
    return abs((end - start).days) + 1


def overlap_days(a_start: date, a_end: date, b_start: date, b_end: date) -> int:
    """Days shared by two closed intervals, 0 when they do not intersect."""
    start = max(a_start, b_start)
    end = min(a_end, b_end)
    if start > end:
        return 0
    return days_between_inclusive(start, end)


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(value: date, years: int) -> date:
    return add_months(value, years * 12)


def month_start(year: int, month_index: int) -> date:
    """First day of a month given a 0-based month index (0 = January)."""
    return date(year, month_index + 1, 1)


def month_end(year: int, month_index: int) -> date:
    return date(year, month_index + 1, calendar.monthrange(year, month_index + 1)[1])


def next_month(year: int, month_index: int) -> tuple[int, int]:
    if month_index >= 11:
        return year + 1, 0
    return year, month_index + 1


def month_prefix(year: int, month_index: int) -> str:
    """ISO ``YYYY-MM`` prefix used to match payment dates to a month."""
    return f"{year}-{month_index + 1:02d}"


def parse_month(value: str) -> tuple[int, int]:
    """Parse ``YYYY-MM`` into (year, 0-based month index)."""
    parts = value.split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month '{value}', month must be between 01 and 12")
    return year, month - 1


def period_bounds(year: int, quarter: str = "All") -> tuple[date, date]:
    """First and last day of a reporting period (whole year or one quarter)."""
    months = QUARTER_MONTHS[quarter]
    return month_start(year, months[0]), month_end(year, months[-1])


def day_before(value: date) -> date:
    return value - timedelta(days=1)


def day_after(value: date) -> date:
    return value + timedelta(days=1)
