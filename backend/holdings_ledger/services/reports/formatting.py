# backend/holdings_ledger/services/reports/formatting.py
"""
Presentation helpers for dashboard and report payloads.

- round_currency / round_percentage: quantize to 2 decimal places
- time_ago: relative timestamp text ("3 hours ago")

Rounding uses the Decimal context default (ROUND_HALF_EVEN), and happens
only here, after all arithmetic is done.
"""

from datetime import datetime, timezone
from decimal import Decimal

from holdings_ledger.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    CURRENCY_QUANTUM,
    DAYS_PER_MONTH_APPROX,
    PERCENTAGE_QUANTUM,
    ZERO,
)


def round_currency(value: Decimal | None) -> Decimal:
    if value is None:
        return ZERO.quantize(CURRENCY_QUANTUM)
    return value.quantize(CURRENCY_QUANTUM)


def round_percentage(value: Decimal | None) -> Decimal:
    if value is None:
        return ZERO.quantize(PERCENTAGE_QUANTUM)
    return value.quantize(PERCENTAGE_QUANTUM)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''} ago"


def time_ago(moment: datetime, now: datetime) -> str:
    """
    Relative description of `moment` as seen at `now`.

    Naive datetimes are taken as UTC (SQLite drops tzinfo on read).

    Steps:
        < 1 minute   "just now"
        < 1 hour     "N minute(s) ago"
        < 1 day      "N hour(s) ago"
        < 30 days    "N day(s) ago"
        < 365 days   "N month(s) ago"  (days // 30)
        otherwise    "N year(s) ago"   (days // 365)

    Example:
        >>> time_ago(datetime(2024, 1, 1, 12, 0), datetime(2024, 1, 1, 15, 30))
        '3 hours ago'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    elapsed = now - moment
    seconds = max(int(elapsed.total_seconds()), 0)
    days = seconds // 86400

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return _plural(seconds // 60, "minute")
    if seconds < 86400:
        return _plural(seconds // 3600, "hour")
    if days < DAYS_PER_MONTH_APPROX:
        return _plural(days, "day")
    if days < CALENDAR_DAYS_PER_YEAR:
        return _plural(days // DAYS_PER_MONTH_APPROX, "month")
    return _plural(days // CALENDAR_DAYS_PER_YEAR, "year")
