# backend/holdings_ledger/schemas/dashboard.py
"""
Pydantic schemas for the Dashboard API.

Every widget of the dashboard has its own response model so it can be
fetched alone; DashboardResponse bundles all of them in one payload.

All money and percentage values are rounded to 2 decimal places.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from holdings_ledger.models import HoldingCategory, TransactionType
from holdings_ledger.schemas.analytics import DistributionItem, PerformanceItem, RankedPerformanceItem


# =============================================================================
# SUMMARY CARDS
# =============================================================================

class SummaryCardsResponse(BaseModel):
    """Headline numbers across all of the user's holdings."""

    total_value: Decimal = Field(..., description="Sum of current values")
    total_invested: Decimal = Field(..., description="Sum of initial amounts")
    total_gain_loss: Decimal
    total_gain_loss_percentage: Decimal
    active_holdings: int
    total_holdings: int
    best_performer: PerformanceItem | None = Field(None, description="Highest gain %")
    worst_performer: PerformanceItem | None = Field(None, description="Lowest gain %")
    total_transactions: int
    last_transaction_date: date | None
    portfolio_count: int


# =============================================================================
# CHARTS
# =============================================================================

class PerformanceChartResponse(BaseModel):
    """Month-end values for a line chart, oldest month first."""

    labels: list[str] = Field(..., examples=[["Jan 2024", "Feb 2024"]])
    values: list[Decimal]
    invested_values: list[Decimal]
    start_value: Decimal
    current_value: Decimal
    total_growth: Decimal
    total_growth_percentage: Decimal
    months_covered: int
    period_start: date | None
    period_end: date | None


class MonthlyPerformanceItem(BaseModel):
    month: str = Field(..., examples=["Jan 2024"])
    start_value: Decimal
    end_value: Decimal
    growth: Decimal
    growth_percentage: Decimal
    transaction_count: int


class AssetAllocationResponse(BaseModel):
    """Category split of Active holdings."""

    labels: list[str]
    values: list[Decimal]
    items: list[DistributionItem]
    total_value: Decimal
    total_holdings: int


# =============================================================================
# ACTIVITY
# =============================================================================

class RecentTransactionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    holding_id: int
    holding_name: str
    holding_category: HoldingCategory
    transaction_type: TransactionType
    amount: Decimal
    quantity: Decimal
    price_per_unit: Decimal
    transaction_date: date
    notes: str | None
    created_at: datetime
    time_ago: str = Field(..., examples=["3 hours ago"])


class QuickStatsResponse(BaseModel):
    """Day-over-day and month-to-date movement."""

    today_gain_loss: Decimal
    today_gain_loss_percentage: Decimal
    month_growth: Decimal
    month_growth_percentage: Decimal
    transactions_this_month: int


class PortfolioBreakdownResponse(BaseModel):
    """Status split of all holdings, largest value first."""

    items: list[DistributionItem]
    active_holdings: int
    sold_holdings: int
    on_hold_holdings: int
    active_value: Decimal
    sold_value: Decimal
    on_hold_value: Decimal


# =============================================================================
# FULL DASHBOARD
# =============================================================================

class DashboardResponse(BaseModel):
    summary_cards: SummaryCardsResponse
    performance_chart: PerformanceChartResponse
    monthly_performance: list[MonthlyPerformanceItem]
    asset_allocation: AssetAllocationResponse
    recent_transactions: list[RecentTransactionItem]
    top_performers: list[RankedPerformanceItem]
    worst_performers: list[RankedPerformanceItem]
    quick_stats: QuickStatsResponse
    portfolio_breakdown: PortfolioBreakdownResponse
    generated_at: datetime
