# backend/holdings_ledger/services/reports/dashboard.py
"""
Dashboard composition.

DashboardComposer is pure: it turns a LedgerSnapshot and an as-of date into
rounded response models. DashboardService loads the snapshot and supplies
the clock.

Widgets:
- summary_cards: totals, best/worst holding, activity counts
- performance_chart / monthly_performance: trailing month series
- asset_allocation: category split of Active holdings
- recent_transactions: newest recorded entries with relative time
- top_performers / worst_performers: gain % ranking
- quick_stats: day-over-day and month-to-date movement
- portfolio_breakdown: status split

Usage:
    service = DashboardService(SqlLedgerStore())
    payload = service.dashboard(db, user_id=1)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from holdings_ledger.models import HoldingStatus, Transaction
from holdings_ledger.schemas.dashboard import (
    AssetAllocationResponse,
    DashboardResponse,
    MonthlyPerformanceItem,
    PerformanceChartResponse,
    PortfolioBreakdownResponse,
    QuickStatsResponse,
    RecentTransactionItem,
    SummaryCardsResponse,
)
from holdings_ledger.schemas.analytics import RankedPerformanceItem
from holdings_ledger.services.analytics import (
    DistributionCalculator,
    DistributionGroup,
    PerformanceRanker,
    RankDimension,
    RankDirection,
)
from holdings_ledger.services.analytics.returns import calculate_gain_loss_percentage
from holdings_ledger.services.constants import (
    DEFAULT_CHART_MONTHS,
    DEFAULT_PERFORMER_COUNT,
    DEFAULT_RECENT_TRANSACTIONS,
    ZERO,
)
from holdings_ledger.services.ledger.store import SqlLedgerStore
from holdings_ledger.services.protocols import HoldingRecord
from holdings_ledger.services.reports.formatting import round_currency, round_percentage, time_ago
from holdings_ledger.services.reports.items import distribution_item, performance_item, ranked_item
from holdings_ledger.services.reports.snapshot import LedgerSnapshot, load_snapshot
from holdings_ledger.services.valuation import (
    PeriodCalculator,
    PeriodGranularity,
    ValuationCalculator,
    group_by_holding,
    growth_percentage,
)
from holdings_ledger.utils.date_utils import day_before, month_bounds

logger = logging.getLogger(__name__)


class DashboardComposer:
    """
    Builds dashboard widgets from a snapshot.

    Attributes:
        _valuation: Point-in-time replay (quick stats)
        _periods: Month series (charts)
        _ranker: Performance ranking
        _distribution: Category and status splits
    """

    def __init__(
            self,
            valuation: ValuationCalculator | None = None,
            periods: PeriodCalculator | None = None,
            ranker: PerformanceRanker | None = None,
            distribution: DistributionCalculator | None = None,
    ) -> None:
        self._valuation = valuation or ValuationCalculator()
        self._periods = periods or PeriodCalculator(self._valuation)
        self._ranker = ranker or PerformanceRanker()
        self._distribution = distribution or DistributionCalculator()

    # =========================================================================
    # WIDGETS
    # =========================================================================

    def summary_cards(self, snapshot: LedgerSnapshot, as_of: date) -> SummaryCardsResponse:
        holdings = snapshot.holdings
        total_value = sum((h.current_value for h in holdings), ZERO)
        total_invested = sum((h.initial_amount for h in holdings), ZERO)

        best = self._ranker.rank(holdings, RankDimension.PERCENTAGE, RankDirection.TOP, 1, as_of)
        worst = self._ranker.rank(holdings, RankDimension.PERCENTAGE, RankDirection.WORST, 1, as_of)

        return SummaryCardsResponse(
            total_value=round_currency(total_value),
            total_invested=round_currency(total_invested),
            total_gain_loss=round_currency(total_value - total_invested),
            total_gain_loss_percentage=round_percentage(
                calculate_gain_loss_percentage(total_invested, total_value)
            ),
            active_holdings=sum(1 for h in holdings if h.status == HoldingStatus.ACTIVE),
            total_holdings=len(holdings),
            best_performer=performance_item(best[0].performance) if best else None,
            worst_performer=performance_item(worst[0].performance) if worst else None,
            total_transactions=len(snapshot.transactions),
            last_transaction_date=max(
                (t.transaction_date for t in snapshot.transactions), default=None
            ),
            portfolio_count=snapshot.portfolio_count,
        )

    def performance_chart(
            self,
            snapshot: LedgerSnapshot,
            as_of: date,
            months: int = DEFAULT_CHART_MONTHS,
    ) -> PerformanceChartResponse:
        series = self._periods.period_series(
            snapshot.holdings, snapshot.transactions, PeriodGranularity.MONTH, months, as_of
        )
        periods = series.periods

        return PerformanceChartResponse(
            labels=series.labels,
            values=[round_currency(v) for v in series.end_values],
            invested_values=[round_currency(v) for v in series.invested_values],
            start_value=round_currency(series.starting_value),
            current_value=round_currency(series.ending_value),
            total_growth=round_currency(series.total_growth),
            total_growth_percentage=round_percentage(series.total_growth_percentage),
            months_covered=len(periods),
            period_start=periods[0].period_start if periods else None,
            period_end=periods[-1].period_end if periods else None,
        )

    def monthly_performance(
            self,
            snapshot: LedgerSnapshot,
            as_of: date,
            months: int = DEFAULT_CHART_MONTHS,
    ) -> list[MonthlyPerformanceItem]:
        series = self._periods.period_series(
            snapshot.holdings, snapshot.transactions, PeriodGranularity.MONTH, months, as_of
        )
        return [
            MonthlyPerformanceItem(
                month=p.label,
                start_value=round_currency(p.start_value),
                end_value=round_currency(p.end_value),
                growth=round_currency(p.growth),
                growth_percentage=round_percentage(p.growth_percentage),
                transaction_count=p.transaction_count,
            )
            for p in series.periods
        ]

    def asset_allocation(self, holdings: Sequence[HoldingRecord]) -> AssetAllocationResponse:
        buckets = self._distribution.distribution(holdings, DistributionGroup.CATEGORY, active_only=True)
        items = [distribution_item(b) for b in buckets]

        return AssetAllocationResponse(
            labels=[item.name for item in items],
            values=[item.total_value for item in items],
            items=items,
            total_value=round_currency(sum((b.total_value for b in buckets), ZERO)),
            total_holdings=sum(b.count for b in buckets),
        )

    def recent_transactions(
            self,
            transactions: Sequence[Transaction],
            now: datetime,
    ) -> list[RecentTransactionItem]:
        """Entries must already be newest first and carry their holding."""
        return [
            RecentTransactionItem(
                id=t.id,
                holding_id=t.holding_id,
                holding_name=t.holding.name,
                holding_category=t.holding.category,
                transaction_type=t.transaction_type,
                amount=round_currency(t.amount),
                quantity=t.quantity,
                price_per_unit=t.price_per_unit,
                transaction_date=t.transaction_date,
                notes=t.notes,
                created_at=t.created_at,
                time_ago=time_ago(t.created_at, now),
            )
            for t in transactions
        ]

    def top_performers(
            self,
            holdings: Sequence[HoldingRecord],
            as_of: date,
            count: int = DEFAULT_PERFORMER_COUNT,
    ) -> list[RankedPerformanceItem]:
        ranked = self._ranker.rank(holdings, RankDimension.PERCENTAGE, RankDirection.TOP, count, as_of)
        return [ranked_item(r) for r in ranked]

    def worst_performers(
            self,
            holdings: Sequence[HoldingRecord],
            as_of: date,
            count: int = DEFAULT_PERFORMER_COUNT,
    ) -> list[RankedPerformanceItem]:
        ranked = self._ranker.rank(holdings, RankDimension.PERCENTAGE, RankDirection.WORST, count, as_of)
        return [ranked_item(r) for r in ranked]

    def quick_stats(self, snapshot: LedgerSnapshot, as_of: date) -> QuickStatsResponse:
        """
        today: value at as_of vs value at the day before
        month: value at as_of vs value at the end of the previous month
        """
        by_holding = group_by_holding(snapshot.transactions)
        value_at = self._valuation.portfolio_value_at

        today = value_at(snapshot.holdings, by_holding, as_of).value
        yesterday = value_at(snapshot.holdings, by_holding, day_before(as_of)).value

        month_start, _ = month_bounds(as_of)
        month_open = value_at(snapshot.holdings, by_holding, day_before(month_start)).value

        return QuickStatsResponse(
            today_gain_loss=round_currency(today - yesterday),
            today_gain_loss_percentage=round_percentage(growth_percentage(yesterday, today)),
            month_growth=round_currency(today - month_open),
            month_growth_percentage=round_percentage(growth_percentage(month_open, today)),
            transactions_this_month=sum(
                1 for t in snapshot.transactions if month_start <= t.transaction_date <= as_of
            ),
        )

    def portfolio_breakdown(self, holdings: Sequence[HoldingRecord]) -> PortfolioBreakdownResponse:
        buckets = {b.key: b for b in self._distribution.distribution(holdings, DistributionGroup.STATUS)}

        def count_of(status: HoldingStatus) -> int:
            return buckets[status].count if status in buckets else 0

        def value_of(status: HoldingStatus):
            return round_currency(buckets[status].total_value if status in buckets else ZERO)

        return PortfolioBreakdownResponse(
            items=[distribution_item(b) for b in buckets.values()],
            active_holdings=count_of(HoldingStatus.ACTIVE),
            sold_holdings=count_of(HoldingStatus.SOLD),
            on_hold_holdings=count_of(HoldingStatus.ON_HOLD),
            active_value=value_of(HoldingStatus.ACTIVE),
            sold_value=value_of(HoldingStatus.SOLD),
            on_hold_value=value_of(HoldingStatus.ON_HOLD),
        )

    def dashboard(
            self,
            snapshot: LedgerSnapshot,
            recent: Sequence[Transaction],
            as_of: date,
            now: datetime,
            months: int = DEFAULT_CHART_MONTHS,
            performer_count: int = DEFAULT_PERFORMER_COUNT,
    ) -> DashboardResponse:
        return DashboardResponse(
            summary_cards=self.summary_cards(snapshot, as_of),
            performance_chart=self.performance_chart(snapshot, as_of, months),
            monthly_performance=self.monthly_performance(snapshot, as_of, months),
            asset_allocation=self.asset_allocation(snapshot.holdings),
            recent_transactions=self.recent_transactions(recent, now),
            top_performers=self.top_performers(snapshot.holdings, as_of, performer_count),
            worst_performers=self.worst_performers(snapshot.holdings, as_of, performer_count),
            quick_stats=self.quick_stats(snapshot, as_of),
            portfolio_breakdown=self.portfolio_breakdown(snapshot.holdings),
            generated_at=now,
        )


class DashboardService:
    """
    Loads a user's snapshot and hands it to the composer.

    The clock is read here and nowhere below.
    """

    def __init__(self, store: SqlLedgerStore, composer: DashboardComposer | None = None) -> None:
        self._store = store
        self._composer = composer or DashboardComposer()

    @property
    def composer(self) -> DashboardComposer:
        return self._composer

    def snapshot(self, db: Session, user_id: int) -> LedgerSnapshot:
        return load_snapshot(db, self._store, user_id)

    def recent(self, db: Session, user_id: int, limit: int = DEFAULT_RECENT_TRANSACTIONS) -> list[Transaction]:
        return self._store.get_recent_transactions(db, user_id, limit)

    def dashboard(
            self,
            db: Session,
            user_id: int,
            as_of: date | None = None,
            now: datetime | None = None,
    ) -> DashboardResponse:
        now = now or datetime.now(timezone.utc)
        as_of = as_of or now.date()

        snapshot = self.snapshot(db, user_id)
        recent = self.recent(db, user_id)

        logger.info(f"Composing dashboard for user {user_id} as of {as_of}")
        return self._composer.dashboard(snapshot, recent, as_of, now)
