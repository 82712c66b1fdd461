# backend/holdings_ledger/services/analytics/ranking.py
"""
Performance ranking of holdings.

Ranks holdings by one of three dimensions:

    PERCENTAGE     gain_loss_percentage  (holdings without principal excluded)
    ABSOLUTE_GAIN  gain_loss             (holdings without principal excluded)
    CURRENT_VALUE  current_value         (all holdings)

TOP orders the dimension descending, WORST ascending. Ties go to the lower
holding id in both directions, so rankings are deterministic. Ranks are
1-based and consecutive.

The as-of date is always passed in: days held and annualized return never
read the wall clock.
"""

import logging
from collections import defaultdict
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from holdings_ledger.models import HoldingCategory
from holdings_ledger.services.analytics.returns import (
    calculate_annualized_return,
    calculate_gain_loss,
    calculate_gain_loss_percentage,
    days_between,
)
from holdings_ledger.services.analytics.types import (
    CategoryPerformance,
    CategoryTotals,
    HoldingPerformance,
    RankDimension,
    RankDirection,
    RankedHolding,
)
from holdings_ledger.services.constants import ZERO
from holdings_ledger.services.protocols import HoldingRecord

logger = logging.getLogger(__name__)


class PerformanceRanker:
    """Stateless calculator for per-holding returns and ranked views."""

    def performance(self, holding: HoldingRecord, as_of: date) -> HoldingPerformance:
        """Gain/loss, gain %, days held and annualized return of one holding."""
        days_held = days_between(holding.purchase_date, as_of)

        return HoldingPerformance(
            holding_id=holding.id,
            name=holding.name,
            category=holding.category,
            status=holding.status,
            purchase_date=holding.purchase_date,
            initial_amount=holding.initial_amount,
            current_value=holding.current_value,
            gain_loss=calculate_gain_loss(holding.initial_amount, holding.current_value),
            gain_loss_percentage=calculate_gain_loss_percentage(
                holding.initial_amount, holding.current_value
            ),
            days_held=days_held,
            annualized_return=calculate_annualized_return(
                holding.initial_amount, holding.current_value, days_held
            ),
        )

    def rank(
            self,
            holdings: Sequence[HoldingRecord],
            dimension: RankDimension,
            direction: RankDirection,
            top_n: int | None,
            as_of: date,
    ) -> list[RankedHolding]:
        """
        Ordered view of holdings along one dimension.

        Args:
            holdings: Candidates (soft-deleted rows already excluded)
            dimension: What to sort by
            direction: TOP (descending) or WORST (ascending)
            top_n: Keep only the first N; None keeps all
            as_of: Reference date for days held

        Returns:
            RankedHolding list with ranks 1..N
        """
        if dimension == RankDimension.CURRENT_VALUE:
            candidates = list(holdings)
        else:
            candidates = [h for h in holdings if h.initial_amount > ZERO]

        performances = [self.performance(h, as_of) for h in candidates]

        def sort_key(p: HoldingPerformance) -> tuple[Decimal, int]:
            metric = _metric(p, dimension)
            if direction == RankDirection.TOP:
                metric = -metric
            return metric, p.holding_id

        performances.sort(key=sort_key)

        if top_n is not None:
            performances = performances[:max(top_n, 0)]

        return [
            RankedHolding(rank=position, performance=p)
            for position, p in enumerate(performances, start=1)
        ]

    def category_summary(
            self,
            holdings: Sequence[HoldingRecord],
            as_of: date,
    ) -> list[CategoryPerformance]:
        """
        Per-category gain % statistics, best average first.

        Only holdings with principal > 0 take part; categories without any
        such holding are omitted.
        """
        grouped: dict[HoldingCategory, list[Decimal]] = defaultdict(list)
        for holding in holdings:
            if holding.initial_amount <= ZERO:
                continue
            grouped[holding.category].append(self.performance(holding, as_of).gain_loss_percentage)

        summaries = [
            CategoryPerformance(
                category=category,
                count=len(percentages),
                average_gain_loss_percentage=sum(percentages, ZERO) / Decimal(len(percentages)),
                best_gain_loss_percentage=max(percentages),
                worst_gain_loss_percentage=min(percentages),
            )
            for category, percentages in grouped.items()
        ]
        summaries.sort(key=lambda s: (-s.average_gain_loss_percentage, s.category.value))
        return summaries

    def category_totals(self, holdings: Sequence[HoldingRecord]) -> list[CategoryTotals]:
        """Invested and current totals per category, best gain % first."""
        grouped: dict[HoldingCategory, list[HoldingRecord]] = defaultdict(list)
        for holding in holdings:
            grouped[holding.category].append(holding)

        totals = []
        for category, members in grouped.items():
            invested = sum((h.initial_amount for h in members), ZERO)
            current = sum((h.current_value for h in members), ZERO)
            totals.append(CategoryTotals(
                category=category,
                count=len(members),
                total_invested=invested,
                current_value=current,
                gain_loss=current - invested,
                gain_loss_percentage=calculate_gain_loss_percentage(invested, current),
            ))

        totals.sort(key=lambda t: (-t.gain_loss_percentage, t.category.value))
        return totals


def _metric(performance: HoldingPerformance, dimension: RankDimension) -> Decimal:
    if dimension == RankDimension.PERCENTAGE:
        return performance.gain_loss_percentage
    if dimension == RankDimension.ABSOLUTE_GAIN:
        return performance.gain_loss
    return performance.current_value
