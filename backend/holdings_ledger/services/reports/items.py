# backend/holdings_ledger/services/reports/items.py
"""
Map engine results to rounded payload items.

Engine types carry full Decimal precision; every mapper here rounds money
and percentages to 2 places on the way out.
"""

from holdings_ledger.schemas.analytics import (
    CategoryPerformanceItem,
    CategoryTotalsItem,
    DistributionItem,
    PerformanceItem,
    PeriodComparisonItem,
    PeriodItem,
    RankedPerformanceItem,
    SizeBucketItem,
)
from holdings_ledger.services.analytics.types import (
    CategoryPerformance,
    CategoryTotals,
    DistributionBucket,
    HoldingPerformance,
    RankedHolding,
    SizeBucket,
)
from holdings_ledger.services.reports.formatting import round_currency, round_percentage
from holdings_ledger.services.valuation.types import PeriodComparison, PeriodSummary


def performance_item(performance: HoldingPerformance) -> PerformanceItem:
    return PerformanceItem(**_performance_fields(performance))


def ranked_item(ranked: RankedHolding) -> RankedPerformanceItem:
    return RankedPerformanceItem(rank=ranked.rank, **_performance_fields(ranked.performance))


def _performance_fields(p: HoldingPerformance) -> dict:
    return {
        "holding_id": p.holding_id,
        "name": p.name,
        "category": p.category,
        "status": p.status,
        "purchase_date": p.purchase_date,
        "initial_amount": round_currency(p.initial_amount),
        "current_value": round_currency(p.current_value),
        "gain_loss": round_currency(p.gain_loss),
        "gain_loss_percentage": round_percentage(p.gain_loss_percentage),
        "days_held": p.days_held,
        "annualized_return": round_percentage(p.annualized_return),
    }


def category_performance_item(summary: CategoryPerformance) -> CategoryPerformanceItem:
    return CategoryPerformanceItem(
        category=summary.category,
        count=summary.count,
        average_gain_loss_percentage=round_percentage(summary.average_gain_loss_percentage),
        best_gain_loss_percentage=round_percentage(summary.best_gain_loss_percentage),
        worst_gain_loss_percentage=round_percentage(summary.worst_gain_loss_percentage),
    )


def category_totals_item(totals: CategoryTotals) -> CategoryTotalsItem:
    return CategoryTotalsItem(
        category=totals.category,
        count=totals.count,
        total_invested=round_currency(totals.total_invested),
        current_value=round_currency(totals.current_value),
        gain_loss=round_currency(totals.gain_loss),
        gain_loss_percentage=round_percentage(totals.gain_loss_percentage),
    )


def distribution_item(bucket: DistributionBucket) -> DistributionItem:
    return DistributionItem(
        name=bucket.name,
        count=bucket.count,
        total_value=round_currency(bucket.total_value),
        percentage=round_percentage(bucket.percentage),
        color=bucket.color,
    )


def size_bucket_item(bucket: SizeBucket) -> SizeBucketItem:
    return SizeBucketItem(
        label=bucket.label,
        lower_bound=bucket.lower_bound,
        upper_bound=bucket.upper_bound,
        count=bucket.count,
        total_value=round_currency(bucket.total_value),
    )


def period_item(period: PeriodSummary) -> PeriodItem:
    return PeriodItem(
        label=period.label,
        period_start=period.period_start,
        period_end=period.period_end,
        start_value=round_currency(period.start_value),
        end_value=round_currency(period.end_value),
        growth=round_currency(period.growth),
        growth_percentage=round_percentage(period.growth_percentage),
        invested=round_currency(period.invested),
        transaction_count=period.transaction_count,
        transaction_volume=round_currency(period.transaction_volume),
        new_holdings=period.new_holdings,
    )


def comparison_item(comparison: PeriodComparison) -> PeriodComparisonItem:
    return PeriodComparisonItem(
        label=comparison.label,
        growth_difference=round_currency(comparison.growth_difference),
        growth_difference_percentage=round_percentage(comparison.growth_difference_percentage),
        transaction_count_difference=comparison.transaction_count_difference,
    )
