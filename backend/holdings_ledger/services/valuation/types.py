# backend/holdings_ledger/services/valuation/types.py
"""
Internal data types for the valuation engine.

These dataclasses are NOT Pydantic schemas - the API shapes live in
holdings_ledger/schemas/. They are plain records so exporters and
routers can serialize them without re-deriving numbers.

Design Principles:
- Immutable value objects (frozen=True)
- Decimal for ALL financial values, unrounded (rounding happens in the
  report composers)
- date (not datetime) for valuation dates

Type Hierarchy:
    HoldingValuation   - Replayed value and principal of one holding at a date
    PortfolioSnapshot  - Summed value and principal of many holdings at a date
    PeriodSummary      - One calendar month or year of a trend series
    PeriodSeries       - Ordered periods plus derived best/worst/averages
    PeriodComparison   - Year-over-year delta between consecutive periods
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


class PeriodGranularity(str, enum.Enum):
    MONTH = "Month"
    YEAR = "Year"


# =============================================================================
# POINT-IN-TIME
# =============================================================================

@dataclass(frozen=True)
class HoldingValuation:
    """
    Value of one holding at a cutoff date.

    Attributes:
        value: Replayed ledger value (0 before the purchase date)
        principal: initial_amount if owned at the date, else 0
    """

    value: Decimal
    principal: Decimal


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Sum of HoldingValuation over a set of holdings at one date."""

    as_of: date
    value: Decimal
    principal: Decimal

    @property
    def gain_loss(self) -> Decimal:
        return self.value - self.principal


# =============================================================================
# PERIODS
# =============================================================================

@dataclass(frozen=True)
class PeriodSummary:
    """
    One calendar period of a trend series.

    start_value is measured the day before period_start, end_value on
    period_end. growth_percentage is 0 when start_value is 0.

    Attributes:
        label: "Jan 2024" for months, "2024" for years
        invested: Principal of holdings owned at period_end
        transaction_count: Ledger entries dated within the period
        transaction_volume: Sum of their amounts
        new_holdings: Holdings purchased within the period
    """

    label: str
    period_start: date
    period_end: date
    start_value: Decimal
    end_value: Decimal
    growth: Decimal
    growth_percentage: Decimal
    invested: Decimal
    transaction_count: int
    transaction_volume: Decimal
    new_holdings: int


@dataclass(frozen=True)
class PeriodComparison:
    """Difference between a period and the one before it."""

    label: str
    growth_difference: Decimal
    growth_difference_percentage: Decimal
    transaction_count_difference: int


@dataclass(frozen=True)
class PeriodSeries:
    """
    Chronological periods and their derived summary.

    best_period / worst_period are the argmax / argmin of growth_percentage;
    the earliest period wins ties. Both are None for an empty series.
    """

    granularity: PeriodGranularity
    periods: list[PeriodSummary] = field(default_factory=list)
    best_period: PeriodSummary | None = None
    worst_period: PeriodSummary | None = None
    average_growth: Decimal = Decimal("0")
    average_growth_percentage: Decimal = Decimal("0")
    starting_value: Decimal = Decimal("0")
    ending_value: Decimal = Decimal("0")
    total_growth: Decimal = Decimal("0")
    total_growth_percentage: Decimal = Decimal("0")

    @property
    def labels(self) -> list[str]:
        return [p.label for p in self.periods]

    @property
    def end_values(self) -> list[Decimal]:
        return [p.end_value for p in self.periods]

    @property
    def invested_values(self) -> list[Decimal]:
        return [p.invested for p in self.periods]
