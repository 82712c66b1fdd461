# backend/holdings_ledger/services/valuation/history_calculator.py
"""
Period aggregation over replayed valuations.

Slices time into calendar months or years and values the whole set of
holdings at each boundary:

    start_value = portfolio value on (period_start - 1 day)
    end_value   = portfolio value on period_end
    growth      = end_value - start_value
    growth %    = growth / start_value * 100   (0 when start_value is 0)

Periods with no owned holdings produce all-zero summaries, never errors.

Design Principles:
- Reuses the point-in-time ValuationCalculator for consistency
- The ledger is grouped by holding once per series, not once per period
- Pure: the as-of date is a parameter, nothing reads the clock
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from holdings_ledger.services.constants import HUNDRED, ZERO
from holdings_ledger.services.protocols import HoldingRecord, TransactionRecord
from holdings_ledger.services.valuation.calculators import ValuationCalculator, group_by_holding
from holdings_ledger.services.valuation.types import (
    PeriodComparison,
    PeriodGranularity,
    PeriodSeries,
    PeriodSummary,
)
from holdings_ledger.utils.date_utils import day_before, month_label, trailing_months, trailing_years

logger = logging.getLogger(__name__)


def growth_percentage(start: Decimal, end: Decimal) -> Decimal:
    """(end - start) / start * 100, or 0 when start is not positive."""
    if start <= ZERO:
        return ZERO
    return (end - start) / start * HUNDRED


def _mean(values: list[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return sum(values, ZERO) / Decimal(len(values))


class PeriodCalculator:
    """
    Builds month and year trend series from holdings and their ledgers.

    Attributes:
        _valuation_calc: Point-in-time calculator used at every boundary
    """

    def __init__(self, valuation_calc: ValuationCalculator | None = None) -> None:
        self._valuation_calc = valuation_calc or ValuationCalculator()

    def period_series(
            self,
            holdings: Sequence[HoldingRecord],
            transactions: Sequence[TransactionRecord],
            granularity: PeriodGranularity,
            count: int,
            as_of: date,
    ) -> PeriodSeries:
        """
        Trailing `count` periods ending with the period containing `as_of`.

        Args:
            holdings: Holdings to value (soft-deleted rows already excluded)
            transactions: Flat ledger for those holdings, any order
            granularity: MONTH or YEAR
            count: Number of periods; non-positive gives an empty series
            as_of: Reference date

        Returns:
            PeriodSeries with periods oldest first
        """
        if granularity == PeriodGranularity.MONTH:
            bounds = trailing_months(as_of, count)
        else:
            bounds = trailing_years(as_of, count)

        by_holding = group_by_holding(transactions)
        periods = [
            self._summarize(holdings, transactions, by_holding, start, end, granularity)
            for start, end in bounds
        ]

        logger.debug(
            f"Built {granularity.value} series: {len(periods)} periods, "
            f"{len(holdings)} holdings, {len(transactions)} transactions"
        )

        return self._build_series(granularity, periods)

    def year_range(self, holdings: Sequence[HoldingRecord], as_of: date) -> int:
        """
        Number of calendar years from the earliest purchase through `as_of`.

        1 when there are no holdings, so a yearly series always has the
        current year.
        """
        if not holdings:
            return 1
        first_year = min(h.purchase_date for h in holdings).year
        return max(as_of.year - first_year + 1, 1)

    def year_over_year(self, series: PeriodSeries) -> list[PeriodComparison]:
        """
        Compare each period with the one before it.

        growth_difference_percentage is relative to |previous growth| and is
        0 when the previous period had no growth.
        """
        comparisons = []
        for previous, current in zip(series.periods, series.periods[1:]):
            difference = current.growth - previous.growth
            if previous.growth != ZERO:
                difference_pct = difference / abs(previous.growth) * HUNDRED
            else:
                difference_pct = ZERO

            comparisons.append(PeriodComparison(
                label=f"{current.label} vs {previous.label}",
                growth_difference=difference,
                growth_difference_percentage=difference_pct,
                transaction_count_difference=current.transaction_count - previous.transaction_count,
            ))
        return comparisons

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _summarize(
            self,
            holdings: Sequence[HoldingRecord],
            transactions: Sequence[TransactionRecord],
            by_holding: dict[int, list[TransactionRecord]],
            period_start: date,
            period_end: date,
            granularity: PeriodGranularity,
    ) -> PeriodSummary:
        start = self._valuation_calc.portfolio_value_at(holdings, by_holding, day_before(period_start))
        end = self._valuation_calc.portfolio_value_at(holdings, by_holding, period_end)

        in_period = [
            t for t in transactions
            if period_start <= t.transaction_date <= period_end
        ]

        if granularity == PeriodGranularity.MONTH:
            label = month_label(period_start)
        else:
            label = str(period_start.year)

        return PeriodSummary(
            label=label,
            period_start=period_start,
            period_end=period_end,
            start_value=start.value,
            end_value=end.value,
            growth=end.value - start.value,
            growth_percentage=growth_percentage(start.value, end.value),
            invested=self._valuation_calc.invested_principal_at(holdings, period_end),
            transaction_count=len(in_period),
            transaction_volume=sum((t.amount for t in in_period), ZERO),
            new_holdings=sum(1 for h in holdings if period_start <= h.purchase_date <= period_end),
        )

    def _build_series(
            self,
            granularity: PeriodGranularity,
            periods: list[PeriodSummary],
    ) -> PeriodSeries:
        if not periods:
            return PeriodSeries(granularity=granularity)

        # max()/min() return the first extreme, so the earliest period wins ties
        best = max(periods, key=lambda p: p.growth_percentage)
        worst = min(periods, key=lambda p: p.growth_percentage)

        starting_value = periods[0].start_value
        ending_value = periods[-1].end_value

        return PeriodSeries(
            granularity=granularity,
            periods=periods,
            best_period=best,
            worst_period=worst,
            average_growth=_mean([p.growth for p in periods]),
            average_growth_percentage=_mean([p.growth_percentage for p in periods]),
            starting_value=starting_value,
            ending_value=ending_value,
            total_growth=ending_value - starting_value,
            total_growth_percentage=growth_percentage(starting_value, ending_value),
        )
