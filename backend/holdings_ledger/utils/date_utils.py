# backend/holdings_ledger/utils/date_utils.py
"""
Calendar helpers shared by the period aggregator and the report presets.

All functions work on `datetime.date` (the ledger is daily-granular).

Usage:
    from holdings_ledger.utils.date_utils import month_bounds, add_months

    start, end = month_bounds(date(2024, 2, 10))  # (2024-02-01, 2024-02-29)
"""

import calendar
from datetime import date, timedelta

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def add_months(d: date, months: int) -> date:
    """
    Shift a date by whole calendar months, clamping the day to the month end.

    Example:
        >>> add_months(date(2024, 3, 31), -1)
        datetime.date(2024, 2, 29)
    """
    month_index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_bounds(d: date) -> tuple[date, date]:
    """First and last day of the calendar month containing `d`."""
    last_day = calendar.monthrange(d.year, d.month)[1]
    return date(d.year, d.month, 1), date(d.year, d.month, last_day)


def year_bounds(year: int) -> tuple[date, date]:
    """First and last day of a calendar year."""
    return date(year, 1, 1), date(year, 12, 31)


def trailing_months(as_of: date, count: int) -> list[tuple[date, date]]:
    """
    Bounds of `count` calendar months ending with the month of `as_of`.

    Oldest month first. A non-positive count yields an empty list.
    """
    months = []
    for offset in range(count - 1, -1, -1):
        months.append(month_bounds(add_months(as_of.replace(day=1), -offset)))
    return months


def trailing_years(as_of: date, count: int) -> list[tuple[date, date]]:
    """Bounds of `count` calendar years ending with the year of `as_of`."""
    return [year_bounds(as_of.year - offset) for offset in range(count - 1, -1, -1)]


def month_label(d: date) -> str:
    """Month label in English regardless of the process locale, e.g. 'Jan 2024'."""
    return f"{MONTH_ABBREVIATIONS[d.month - 1]} {d.year}"


def day_before(d: date) -> date:
    return d - timedelta(days=1)
