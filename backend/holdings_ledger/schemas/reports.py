# backend/holdings_ledger/schemas/reports.py
"""
Pydantic schemas for the Reports API.

Six reports share the same conventions:
- report_title and generated_at on every report
- period_start / period_end as display text ("Beginning", "Jun 15, 2024")
- Every Decimal rounded to 2 places by the composer

The same models are what the JSON exporter dumps, so the download and the
API response never disagree.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from holdings_ledger.models import HoldingCategory, HoldingStatus, TransactionType
from holdings_ledger.schemas.analytics import (
    CategoryPerformanceItem,
    CategoryTotalsItem,
    DistributionItem,
    PeriodComparisonItem,
    PeriodItem,
    RankedPerformanceItem,
    SizeBucketItem,
)


# =============================================================================
# PERFORMANCE SUMMARY
# =============================================================================

class MonthlyTrendItem(BaseModel):
    """Value vs invested principal at one month end."""

    month: str = Field(..., examples=["Jan 2024"])
    value: Decimal
    invested: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal


class PerformanceSummaryReport(BaseModel):
    report_title: str = "Performance Summary Report"
    generated_at: datetime
    period_start: str
    period_end: str
    total_invested: Decimal
    current_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percentage: Decimal
    total_holdings: int
    active_holdings: int
    sold_holdings: int
    on_hold_holdings: int
    total_transactions: int
    total_buy_volume: Decimal
    total_sell_volume: Decimal
    top_performers: list[RankedPerformanceItem]
    worst_performers: list[RankedPerformanceItem]
    performance_by_category: list[CategoryTotalsItem]
    monthly_trend: list[MonthlyTrendItem]


# =============================================================================
# DISTRIBUTION
# =============================================================================

class HoldingShareItem(BaseModel):
    """One holding and its share of the total value."""

    holding_id: int
    name: str
    category: HoldingCategory
    status: HoldingStatus
    purchase_date: date
    initial_amount: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal
    share_percentage: Decimal


class DistributionReport(BaseModel):
    report_title: str = "Holdings Distribution Report"
    generated_at: datetime
    total_value: Decimal
    total_holdings: int
    by_category: list[DistributionItem]
    by_status: list[DistributionItem]
    size_distribution: list[SizeBucketItem]
    holdings: list[HoldingShareItem]


# =============================================================================
# TRANSACTION HISTORY
# =============================================================================

class TransactionTypeItem(BaseModel):
    transaction_type: TransactionType
    count: int
    volume: Decimal
    percentage: Decimal = Field(..., description="Share of total volume")


class TransactionMonthItem(BaseModel):
    month: str = Field(..., examples=["Jun 2024"])
    count: int
    volume: Decimal


class TransactionDetailItem(BaseModel):
    transaction_id: int
    transaction_date: date
    holding_id: int
    holding_name: str
    holding_category: HoldingCategory
    transaction_type: TransactionType
    quantity: Decimal
    price_per_unit: Decimal
    amount: Decimal
    notes: str | None


class TransactionHistoryReport(BaseModel):
    report_title: str = "Transaction History Report"
    generated_at: datetime
    period_start: str
    period_end: str
    total_transactions: int
    total_volume: Decimal
    buy_transactions: int
    buy_volume: Decimal
    sell_transactions: int
    sell_volume: Decimal
    update_transactions: int
    by_type: list[TransactionTypeItem]
    by_month: list[TransactionMonthItem] = Field(..., description="Newest month first")
    transactions: list[TransactionDetailItem] = Field(..., description="Newest first")


# =============================================================================
# TRENDS
# =============================================================================

class MonthlyTrendReport(BaseModel):
    report_title: str = "Monthly Performance Trend Report"
    generated_at: datetime
    months_covered: int
    starting_value: Decimal
    ending_value: Decimal
    total_growth: Decimal
    total_growth_percentage: Decimal
    best_month: PeriodItem | None
    worst_month: PeriodItem | None
    average_monthly_growth: Decimal
    average_monthly_growth_percentage: Decimal
    monthly_data: list[PeriodItem]
    chart_labels: list[str]
    chart_values: list[Decimal]
    chart_invested_values: list[Decimal]


class YearOverYearReport(BaseModel):
    report_title: str = "Year-over-Year Comparison Report"
    generated_at: datetime
    years_covered: list[int]
    yearly_summaries: list[PeriodItem]
    comparisons: list[PeriodComparisonItem]
    best_year: PeriodItem | None
    worst_year: PeriodItem | None
    chart_labels: list[str]
    chart_ending_values: list[Decimal]
    chart_growth_percentages: list[Decimal]


# =============================================================================
# TOP PERFORMING
# =============================================================================

class TopPerformingReport(BaseModel):
    report_title: str = "Top Performing Holdings Report"
    generated_at: datetime
    period_start: str
    period_end: str
    total_holdings_analyzed: int
    top_by_percentage: list[RankedPerformanceItem]
    top_by_absolute_gain: list[RankedPerformanceItem]
    top_by_value: list[RankedPerformanceItem]
    category_summaries: list[CategoryPerformanceItem]


# =============================================================================
# METADATA
# =============================================================================

class ReportTypeItem(BaseModel):
    key: str = Field(..., examples=["performance"])
    name: str
    description: str
    csv_export: bool


class DateRangeResponse(BaseModel):
    """Resolved preset; start_date is None for 'alltime'."""

    preset: str
    start_date: date | None
    end_date: date
