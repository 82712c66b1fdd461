# backend/holdings_ledger/services/analytics/returns.py
"""
Return calculation functions for the ranking and report code.

Pure functions, Decimal in and Decimal out:
- Gain/loss and gain/loss percentage against principal
- Annualized (CAGR-style) return over a holding period

Formulas:
    Gain/Loss   = current - initial
    Gain/Loss % = (current - initial) / initial * 100
    Annualized  = (current / initial)^(365/days) - 1

Precision Note:
    Decimal.__pow__() supports non-integer exponents for positive bases, so
    annualization stays in Decimal. Extreme inputs that Decimal rejects fall
    back to float exponentiation (~15 significant digits).
"""

import decimal
import logging
from datetime import date
from decimal import Decimal

from holdings_ledger.services.constants import CALENDAR_DAYS_PER_YEAR, HUNDRED, ZERO

logger = logging.getLogger(__name__)


def calculate_gain_loss(initial_amount: Decimal, current_value: Decimal) -> Decimal:
    return current_value - initial_amount


def calculate_gain_loss_percentage(initial_amount: Decimal, current_value: Decimal) -> Decimal:
    """
    Percentage gain against principal.

    Returns 0 (not an error) when initial_amount <= 0.

    Example:
        >>> calculate_gain_loss_percentage(Decimal("100"), Decimal("150"))
        Decimal('50.0')
    """
    if initial_amount <= ZERO:
        return ZERO
    return (current_value - initial_amount) / initial_amount * HUNDRED


def days_between(start: date, end: date) -> int:
    return (end - start).days


def annualize_return(
        total_return: Decimal,
        days: int,
) -> Decimal | None:
    """
    Annualize a return over a given number of days.

    Formula: (1 + r)^(365/days) - 1

    Args:
        total_return: Total return as decimal (e.g., 0.15 = 15%)
        days: Number of days in the period

    Returns:
        Annualized return as decimal, Decimal("-1") for a total loss,
        or None if days <= 0
    """
    if days <= 0:
        return None

    base = Decimal("1") + total_return
    if base <= 0:
        return Decimal("-1")

    exponent = Decimal(CALENDAR_DAYS_PER_YEAR) / Decimal(days)

    try:
        annualized = base ** exponent - Decimal("1")
    except (decimal.InvalidOperation, decimal.Overflow):
        logger.debug(f"Decimal annualization failed for base={base}, days={days}; using float")
        annualized = Decimal(str(float(base) ** float(exponent))) - Decimal("1")

    return annualized


def calculate_annualized_return(
        initial_amount: Decimal,
        current_value: Decimal,
        days_held: int,
) -> Decimal:
    """
    Annualized return of a holding, in percent.

    Defined as 0 when initial_amount <= 0 or days_held <= 0.
    """
    if initial_amount <= ZERO or days_held <= 0:
        return ZERO

    total_return = current_value / initial_amount - Decimal("1")
    annualized = annualize_return(total_return, days_held)
    if annualized is None:
        return ZERO
    return annualized * HUNDRED
