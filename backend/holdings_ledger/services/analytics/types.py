# backend/holdings_ledger/services/analytics/types.py
"""
Data types for the ranking and distribution calculators.

All money and percentages are Decimal and unrounded.

Architecture:
    - HoldingPerformance: gain/loss and annualized return of one holding
    - RankedHolding: HoldingPerformance with its position in a ranking
    - CategoryPerformance: per-category gain % statistics
    - CategoryTotals: per-category invested/current totals
    - DistributionBucket: one group of a category or status breakdown
    - SizeBucket: one fixed value range
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from holdings_ledger.models import HoldingCategory, HoldingStatus


class RankDimension(str, Enum):
    PERCENTAGE = "Percentage"
    ABSOLUTE_GAIN = "AbsoluteGain"
    CURRENT_VALUE = "CurrentValue"


class RankDirection(str, Enum):
    """TOP sorts the dimension descending, WORST ascending."""
    TOP = "Top"
    WORST = "Worst"


class DistributionGroup(str, Enum):
    CATEGORY = "Category"
    STATUS = "Status"


# =============================================================================
# PERFORMANCE
# =============================================================================

@dataclass(frozen=True)
class HoldingPerformance:
    """
    Return metrics for one holding as of a date.

    Attributes:
        gain_loss: current_value - initial_amount
        gain_loss_percentage: gain_loss / initial_amount * 100, 0 without principal
        days_held: Whole days between purchase_date and the as-of date
        annualized_return: CAGR in percent, 0 without principal or holding time
    """
    holding_id: int
    name: str
    category: HoldingCategory
    status: HoldingStatus
    purchase_date: date
    initial_amount: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal
    days_held: int
    annualized_return: Decimal


@dataclass(frozen=True)
class RankedHolding:
    rank: int
    performance: HoldingPerformance


@dataclass(frozen=True)
class CategoryPerformance:
    """gain % statistics over holdings of one category with principal > 0."""
    category: HoldingCategory
    count: int
    average_gain_loss_percentage: Decimal
    best_gain_loss_percentage: Decimal
    worst_gain_loss_percentage: Decimal


@dataclass(frozen=True)
class CategoryTotals:
    category: HoldingCategory
    count: int
    total_invested: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal


# =============================================================================
# DISTRIBUTION
# =============================================================================

@dataclass(frozen=True)
class DistributionBucket:
    """
    One group of a distribution.

    Attributes:
        key: The category or status member
        name: Its wire value ("RealEstate", "OnHold")
        percentage: Share of the grand total value, 0 when the total is 0
        color: Chart color from the fixed tables in constants.py
    """
    key: HoldingCategory | HoldingStatus
    name: str
    count: int
    total_value: Decimal
    percentage: Decimal
    color: str


@dataclass(frozen=True)
class SizeBucket:
    """Holdings whose current value falls in [lower_bound, upper_bound)."""
    label: str
    lower_bound: Decimal
    upper_bound: Decimal | None
    count: int
    total_value: Decimal
