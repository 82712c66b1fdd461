# backend/holdings_ledger/schemas/analytics.py
"""
Shared payload items for dashboard, report and portfolio responses.

These schemas define the building blocks the composers assemble:
- Performance rows (single holding, ranked holding)
- Distribution rows (category/status share, value-size range)
- Category statistics
- Period rows and year-over-year comparisons

Design decisions:
- Every Decimal here is already rounded to 2 places by the composer
- Enum fields serialize to their wire values ("RealEstate", "OnHold")
- Lists are never null; empty inputs give empty lists
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from holdings_ledger.models import HoldingCategory, HoldingStatus


# =============================================================================
# PERFORMANCE ITEMS
# =============================================================================

class PerformanceItem(BaseModel):
    """Return metrics for one holding."""

    model_config = ConfigDict(from_attributes=True)

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
    annualized_return: Decimal = Field(..., description="CAGR in percent")


class RankedPerformanceItem(PerformanceItem):
    rank: int = Field(..., ge=1)


class CategoryPerformanceItem(BaseModel):
    """Gain % statistics over the holdings of one category."""

    model_config = ConfigDict(from_attributes=True)

    category: HoldingCategory
    count: int
    average_gain_loss_percentage: Decimal
    best_gain_loss_percentage: Decimal
    worst_gain_loss_percentage: Decimal


class CategoryTotalsItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: HoldingCategory
    count: int
    total_invested: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal


# =============================================================================
# DISTRIBUTION ITEMS
# =============================================================================

class DistributionItem(BaseModel):
    """One slice of a category or status distribution."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., examples=["Stocks", "OnHold"])
    count: int
    total_value: Decimal
    percentage: Decimal
    color: str = Field(..., examples=["#3b82f6"])


class SizeBucketItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str = Field(..., examples=["1,000 - 5,000"])
    lower_bound: Decimal
    upper_bound: Decimal | None
    count: int
    total_value: Decimal


# =============================================================================
# PERIOD ITEMS
# =============================================================================

class PeriodItem(BaseModel):
    """Valuation of all holdings over one calendar month or year."""

    model_config = ConfigDict(from_attributes=True)

    label: str = Field(..., examples=["Jan 2024", "2024"])
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


class PeriodComparisonItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str = Field(..., examples=["2024 vs 2023"])
    growth_difference: Decimal
    growth_difference_percentage: Decimal
    transaction_count_difference: int
