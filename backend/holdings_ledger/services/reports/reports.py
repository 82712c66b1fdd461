# backend/holdings_ledger/services/reports/reports.py
"""
Report composition.

ReportComposer is pure: snapshot + dates in, rounded report models out.
ReportService loads the snapshot, resolves presets against the clock and
renders exports.

Reports:
    performance     Totals, status counts, top/worst 5, by category, 6-month trend
    distribution    Category / status / size breakdowns and per-holding shares
    transactions    Volumes by type and month, detail rows
    monthly         Trailing month series with chart vectors
    yearoveryear    Yearly series since the first purchase, consecutive comparisons
    topperforming   Top N by gain %, absolute gain and value; category summary

Date filters (performance, transactions, topperforming):
- Holdings are kept when start <= purchase_date <= end
- Ledger entries are kept when start <= transaction_date <= end
- A missing start means "from the beginning", a missing end means as_of
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from holdings_ledger.models import HoldingStatus, TransactionType
from holdings_ledger.schemas.reports import (
    DateRangeResponse,
    DistributionReport,
    HoldingShareItem,
    MonthlyTrendItem,
    MonthlyTrendReport,
    PerformanceSummaryReport,
    ReportTypeItem,
    TopPerformingReport,
    TransactionDetailItem,
    TransactionHistoryReport,
    TransactionMonthItem,
    TransactionTypeItem,
    YearOverYearReport,
)
from holdings_ledger.schemas.validators import parse_enum
from holdings_ledger.services.analytics import (
    DistributionCalculator,
    DistributionGroup,
    PerformanceRanker,
    RankDimension,
    RankDirection,
    share_of,
)
from holdings_ledger.services.analytics.returns import calculate_gain_loss, calculate_gain_loss_percentage
from holdings_ledger.services.constants import (
    PERFORMANCE_SUMMARY_TOP_COUNT,
    PERFORMANCE_SUMMARY_TREND_MONTHS,
    ZERO,
)
from holdings_ledger.services.exceptions import InvalidDateRangeError
from holdings_ledger.services.ledger.store import SqlLedgerStore
from holdings_ledger.services.protocols import HoldingRecord, TimestampedTransactionRecord
from holdings_ledger.services.reports.export import export_report
from holdings_ledger.services.reports.formatting import round_currency, round_percentage
from holdings_ledger.services.reports.items import (
    category_performance_item,
    category_totals_item,
    comparison_item,
    distribution_item,
    period_item,
    ranked_item,
    size_bucket_item,
)
from holdings_ledger.services.reports.snapshot import LedgerSnapshot, load_snapshot
from holdings_ledger.services.reports.types import DateRangePreset, ExportedReport, ExportFormat, ReportType
from holdings_ledger.services.valuation import PeriodCalculator, PeriodGranularity
from holdings_ledger.utils.date_utils import add_months, month_label

logger = logging.getLogger(__name__)

BEGINNING_LABEL = "Beginning"

_REPORT_TYPES: tuple[tuple[ReportType, str, str, bool], ...] = (
    (ReportType.PERFORMANCE, "Performance Summary",
     "Totals, best and worst holdings, category performance and a 6-month trend", True),
    (ReportType.DISTRIBUTION, "Holdings Distribution",
     "Breakdown by category, status and value size", False),
    (ReportType.TRANSACTIONS, "Transaction History",
     "Volumes by type and month with every ledger entry", True),
    (ReportType.MONTHLY, "Monthly Performance Trend",
     "Month-by-month growth with chart data", False),
    (ReportType.YEAR_OVER_YEAR, "Year-over-Year Comparison",
     "Yearly growth since the first purchase", False),
    (ReportType.TOP_PERFORMING, "Top Performing Holdings",
     "Rankings by gain %, absolute gain and current value", False),
)


def format_period_date(value: date | None, default: str = BEGINNING_LABEL) -> str:
    """'Jun 15, 2024', or `default` when no date was given."""
    if value is None:
        return default
    return value.strftime("%b %d, %Y")


def resolve_date_range(preset: str | DateRangePreset, as_of: date) -> tuple[date | None, date]:
    """
    Turn a preset name into (start, end).

    Raises:
        InvalidDateRangeError: Unknown preset
    """
    try:
        chosen = parse_enum(DateRangePreset, preset)
    except ValueError as e:
        raise InvalidDateRangeError(str(e), field="preset") from e

    if chosen == DateRangePreset.LAST_7_DAYS:
        return date.fromordinal(as_of.toordinal() - 7), as_of
    if chosen == DateRangePreset.LAST_30_DAYS:
        return date.fromordinal(as_of.toordinal() - 30), as_of
    if chosen == DateRangePreset.LAST_3_MONTHS:
        return add_months(as_of, -3), as_of
    if chosen == DateRangePreset.LAST_6_MONTHS:
        return add_months(as_of, -6), as_of
    if chosen == DateRangePreset.LAST_12_MONTHS:
        return add_months(as_of, -12), as_of
    if chosen == DateRangePreset.THIS_YEAR:
        return date(as_of.year, 1, 1), as_of
    if chosen == DateRangePreset.LAST_YEAR:
        return date(as_of.year - 1, 1, 1), date(as_of.year - 1, 12, 31)
    return None, as_of


def _in_range(value: date, start: date | None, end: date) -> bool:
    return (start is None or value >= start) and value <= end


class ReportComposer:
    """
    Builds report models from a snapshot.

    Attributes:
        _periods: Month / year series
        _ranker: Rankings and category statistics
        _distribution: Category / status / size breakdowns
    """

    def __init__(
            self,
            periods: PeriodCalculator | None = None,
            ranker: PerformanceRanker | None = None,
            distribution: DistributionCalculator | None = None,
    ) -> None:
        self._periods = periods or PeriodCalculator()
        self._ranker = ranker or PerformanceRanker()
        self._distribution = distribution or DistributionCalculator()

    # =========================================================================
    # PERFORMANCE SUMMARY
    # =========================================================================

    def performance_summary(
            self,
            snapshot: LedgerSnapshot,
            start: date | None,
            end: date | None,
            as_of: date,
            now: datetime,
    ) -> PerformanceSummaryReport:
        end_date = end or as_of
        holdings = [h for h in snapshot.holdings if _in_range(h.purchase_date, start, end_date)]
        transactions = [t for t in snapshot.transactions if _in_range(t.transaction_date, start, end_date)]

        invested = sum((h.initial_amount for h in holdings), ZERO)
        current = sum((h.current_value for h in holdings), ZERO)
        status_counts = Counter(h.status for h in holdings)

        def volume(kind: TransactionType) -> Decimal:
            return sum((t.amount for t in transactions if t.transaction_type == kind), ZERO)

        top = self._ranker.rank(
            holdings, RankDimension.PERCENTAGE, RankDirection.TOP, PERFORMANCE_SUMMARY_TOP_COUNT, as_of
        )
        worst = self._ranker.rank(
            holdings, RankDimension.PERCENTAGE, RankDirection.WORST, PERFORMANCE_SUMMARY_TOP_COUNT, as_of
        )

        return PerformanceSummaryReport(
            generated_at=now,
            period_start=format_period_date(start),
            period_end=format_period_date(end_date),
            total_invested=round_currency(invested),
            current_value=round_currency(current),
            total_gain_loss=round_currency(current - invested),
            total_gain_loss_percentage=round_percentage(calculate_gain_loss_percentage(invested, current)),
            total_holdings=len(holdings),
            active_holdings=status_counts[HoldingStatus.ACTIVE],
            sold_holdings=status_counts[HoldingStatus.SOLD],
            on_hold_holdings=status_counts[HoldingStatus.ON_HOLD],
            total_transactions=len(transactions),
            total_buy_volume=round_currency(volume(TransactionType.BUY)),
            total_sell_volume=round_currency(volume(TransactionType.SELL)),
            top_performers=[ranked_item(r) for r in top],
            worst_performers=[ranked_item(r) for r in worst],
            performance_by_category=[category_totals_item(t) for t in self._ranker.category_totals(holdings)],
            monthly_trend=self._trend(snapshot, holdings, PERFORMANCE_SUMMARY_TREND_MONTHS, as_of),
        )

    def _trend(
            self,
            snapshot: LedgerSnapshot,
            holdings: list[HoldingRecord],
            months: int,
            as_of: date,
    ) -> list[MonthlyTrendItem]:
        """Month-end value vs principal of `holdings`, replaying their full ledgers."""
        ids = {h.id for h in holdings}
        ledger = [t for t in snapshot.transactions if t.holding_id in ids]
        series = self._periods.period_series(holdings, ledger, PeriodGranularity.MONTH, months, as_of)

        return [
            MonthlyTrendItem(
                month=p.label,
                value=round_currency(p.end_value),
                invested=round_currency(p.invested),
                gain_loss=round_currency(p.end_value - p.invested),
                gain_loss_percentage=round_percentage(calculate_gain_loss_percentage(p.invested, p.end_value)),
            )
            for p in series.periods
        ]

    # =========================================================================
    # DISTRIBUTION
    # =========================================================================

    def distribution_report(self, snapshot: LedgerSnapshot, now: datetime) -> DistributionReport:
        holdings = snapshot.holdings
        total = sum((h.current_value for h in holdings), ZERO)

        ordered = sorted(holdings, key=lambda h: (-h.current_value, h.id))
        rows = [
            HoldingShareItem(
                holding_id=h.id,
                name=h.name,
                category=h.category,
                status=h.status,
                purchase_date=h.purchase_date,
                initial_amount=round_currency(h.initial_amount),
                current_value=round_currency(h.current_value),
                gain_loss=round_currency(calculate_gain_loss(h.initial_amount, h.current_value)),
                gain_loss_percentage=round_percentage(
                    calculate_gain_loss_percentage(h.initial_amount, h.current_value)
                ),
                share_percentage=round_percentage(share_of(h.current_value, total)),
            )
            for h in ordered
        ]

        return DistributionReport(
            generated_at=now,
            total_value=round_currency(total),
            total_holdings=len(holdings),
            by_category=[
                distribution_item(b)
                for b in self._distribution.distribution(holdings, DistributionGroup.CATEGORY)
            ],
            by_status=[
                distribution_item(b)
                for b in self._distribution.distribution(holdings, DistributionGroup.STATUS)
            ],
            size_distribution=[size_bucket_item(b) for b in self._distribution.size_distribution(holdings)],
            holdings=rows,
        )

    # =========================================================================
    # TRANSACTION HISTORY
    # =========================================================================

    def transaction_history(
            self,
            snapshot: LedgerSnapshot,
            start: date | None,
            end: date | None,
            as_of: date,
            now: datetime,
    ) -> TransactionHistoryReport:
        end_date = end or as_of
        holdings_by_id = {h.id: h for h in snapshot.holdings}
        transactions: list[TimestampedTransactionRecord] = [
            t for t in snapshot.transactions
            if _in_range(t.transaction_date, start, end_date) and t.holding_id in holdings_by_id
        ]
        total_volume = sum((t.amount for t in transactions), ZERO)

        counts: Counter[TransactionType] = Counter()
        volumes: dict[TransactionType, Decimal] = defaultdict(lambda: ZERO)
        for t in transactions:
            counts[t.transaction_type] += 1
            volumes[t.transaction_type] += t.amount

        by_type = [
            TransactionTypeItem(
                transaction_type=kind,
                count=counts[kind],
                volume=round_currency(volumes[kind]),
                percentage=round_percentage(share_of(volumes[kind], total_volume)),
            )
            for kind in TransactionType
            if counts[kind]
        ]

        month_counts: Counter[date] = Counter()
        month_volumes: dict[date, Decimal] = defaultdict(lambda: ZERO)
        for t in transactions:
            month = t.transaction_date.replace(day=1)
            month_counts[month] += 1
            month_volumes[month] += t.amount

        by_month = [
            TransactionMonthItem(
                month=month_label(month),
                count=month_counts[month],
                volume=round_currency(month_volumes[month]),
            )
            for month in sorted(month_counts, reverse=True)
        ]

        newest_first = sorted(transactions, key=lambda t: (t.transaction_date, t.id), reverse=True)
        details = [
            TransactionDetailItem(
                transaction_id=t.id,
                transaction_date=t.transaction_date,
                holding_id=t.holding_id,
                holding_name=holdings_by_id[t.holding_id].name,
                holding_category=holdings_by_id[t.holding_id].category,
                transaction_type=t.transaction_type,
                quantity=t.quantity,
                price_per_unit=t.price_per_unit,
                amount=round_currency(t.amount),
                notes=t.notes,
            )
            for t in newest_first
        ]

        return TransactionHistoryReport(
            generated_at=now,
            period_start=format_period_date(start),
            period_end=format_period_date(end_date),
            total_transactions=len(transactions),
            total_volume=round_currency(total_volume),
            buy_transactions=counts[TransactionType.BUY],
            buy_volume=round_currency(volumes[TransactionType.BUY]),
            sell_transactions=counts[TransactionType.SELL],
            sell_volume=round_currency(volumes[TransactionType.SELL]),
            update_transactions=counts[TransactionType.UPDATE],
            by_type=by_type,
            by_month=by_month,
            transactions=details,
        )

    # =========================================================================
    # TRENDS
    # =========================================================================

    def monthly_trend(
            self,
            snapshot: LedgerSnapshot,
            months: int,
            as_of: date,
            now: datetime,
    ) -> MonthlyTrendReport:
        series = self._periods.period_series(
            snapshot.holdings, snapshot.transactions, PeriodGranularity.MONTH, months, as_of
        )

        return MonthlyTrendReport(
            generated_at=now,
            months_covered=len(series.periods),
            starting_value=round_currency(series.starting_value),
            ending_value=round_currency(series.ending_value),
            total_growth=round_currency(series.total_growth),
            total_growth_percentage=round_percentage(series.total_growth_percentage),
            best_month=period_item(series.best_period) if series.best_period else None,
            worst_month=period_item(series.worst_period) if series.worst_period else None,
            average_monthly_growth=round_currency(series.average_growth),
            average_monthly_growth_percentage=round_percentage(series.average_growth_percentage),
            monthly_data=[period_item(p) for p in series.periods],
            chart_labels=series.labels,
            chart_values=[round_currency(v) for v in series.end_values],
            chart_invested_values=[round_currency(v) for v in series.invested_values],
        )

    def year_over_year(self, snapshot: LedgerSnapshot, as_of: date, now: datetime) -> YearOverYearReport:
        years = self._periods.year_range(snapshot.holdings, as_of)
        series = self._periods.period_series(
            snapshot.holdings, snapshot.transactions, PeriodGranularity.YEAR, years, as_of
        )

        return YearOverYearReport(
            generated_at=now,
            years_covered=[p.period_start.year for p in series.periods],
            yearly_summaries=[period_item(p) for p in series.periods],
            comparisons=[comparison_item(c) for c in self._periods.year_over_year(series)],
            best_year=period_item(series.best_period) if series.best_period else None,
            worst_year=period_item(series.worst_period) if series.worst_period else None,
            chart_labels=series.labels,
            chart_ending_values=[round_currency(v) for v in series.end_values],
            chart_growth_percentages=[round_percentage(p.growth_percentage) for p in series.periods],
        )

    # =========================================================================
    # TOP PERFORMING
    # =========================================================================

    def top_performing(
            self,
            snapshot: LedgerSnapshot,
            start: date | None,
            end: date | None,
            top_count: int,
            as_of: date,
            now: datetime,
    ) -> TopPerformingReport:
        end_date = end or as_of
        holdings = [h for h in snapshot.holdings if _in_range(h.purchase_date, start, end_date)]

        def ranked(dimension: RankDimension):
            return [
                ranked_item(r)
                for r in self._ranker.rank(holdings, dimension, RankDirection.TOP, top_count, as_of)
            ]

        return TopPerformingReport(
            generated_at=now,
            period_start=format_period_date(start),
            period_end=format_period_date(end_date),
            total_holdings_analyzed=len(holdings),
            top_by_percentage=ranked(RankDimension.PERCENTAGE),
            top_by_absolute_gain=ranked(RankDimension.ABSOLUTE_GAIN),
            top_by_value=ranked(RankDimension.CURRENT_VALUE),
            category_summaries=[
                category_performance_item(s) for s in self._ranker.category_summary(holdings, as_of)
            ],
        )

    # =========================================================================
    # METADATA
    # =========================================================================

    @staticmethod
    def report_types() -> list[ReportTypeItem]:
        return [
            ReportTypeItem(key=kind.value, name=name, description=description, csv_export=csv_export)
            for kind, name, description, csv_export in _REPORT_TYPES
        ]

    @staticmethod
    def date_range(preset: str | DateRangePreset, as_of: date) -> DateRangeResponse:
        start, end = resolve_date_range(preset, as_of)
        return DateRangeResponse(
            preset=parse_enum(DateRangePreset, preset).value,
            start_date=start,
            end_date=end,
        )


class ReportService:
    """
    Loads snapshots and runs the composer; reads the clock once per call.

    Attributes:
        _store: Ledger store
        _composer: Pure report builder
        _default_top_count: Size of top-performing lists when not given
    """

    def __init__(
            self,
            store: SqlLedgerStore,
            composer: ReportComposer | None = None,
            default_top_count: int = 10,
    ) -> None:
        self._store = store
        self._composer = composer or ReportComposer()
        self._default_top_count = default_top_count

    @property
    def composer(self) -> ReportComposer:
        return self._composer

    def _load(self, db: Session, user_id: int, report: str) -> tuple[LedgerSnapshot, datetime]:
        now = datetime.now(timezone.utc)
        logger.info(f"Generating {report} report for user {user_id}")
        return load_snapshot(db, self._store, user_id), now

    @staticmethod
    def _check_range(start: date | None, end: date | None) -> None:
        if start is not None and end is not None and start > end:
            raise InvalidDateRangeError(
                f"start_date ({start.isoformat()}) must not be after end_date ({end.isoformat()})",
                field="start_date",
            )

    def performance_summary(
            self, db: Session, user_id: int, start: date | None = None, end: date | None = None,
    ) -> PerformanceSummaryReport:
        self._check_range(start, end)
        snapshot, now = self._load(db, user_id, "performance")
        return self._composer.performance_summary(snapshot, start, end, now.date(), now)

    def distribution_report(self, db: Session, user_id: int) -> DistributionReport:
        snapshot, now = self._load(db, user_id, "distribution")
        return self._composer.distribution_report(snapshot, now)

    def transaction_history(
            self, db: Session, user_id: int, start: date | None = None, end: date | None = None,
    ) -> TransactionHistoryReport:
        self._check_range(start, end)
        snapshot, now = self._load(db, user_id, "transactions")
        return self._composer.transaction_history(snapshot, start, end, now.date(), now)

    def monthly_trend(self, db: Session, user_id: int, months: int = 12) -> MonthlyTrendReport:
        snapshot, now = self._load(db, user_id, "monthly")
        return self._composer.monthly_trend(snapshot, months, now.date(), now)

    def year_over_year(self, db: Session, user_id: int) -> YearOverYearReport:
        snapshot, now = self._load(db, user_id, "yearoveryear")
        return self._composer.year_over_year(snapshot, now.date(), now)

    def top_performing(
            self,
            db: Session,
            user_id: int,
            start: date | None = None,
            end: date | None = None,
            top_count: int | None = None,
    ) -> TopPerformingReport:
        self._check_range(start, end)
        snapshot, now = self._load(db, user_id, "topperforming")
        return self._composer.top_performing(
            snapshot, start, end, top_count or self._default_top_count, now.date(), now
        )

    def generate(
            self,
            db: Session,
            user_id: int,
            report_type: ReportType,
            start: date | None = None,
            end: date | None = None,
    ):
        """Build any report by type with its default parameters."""
        if report_type == ReportType.PERFORMANCE:
            return self.performance_summary(db, user_id, start, end)
        if report_type == ReportType.DISTRIBUTION:
            return self.distribution_report(db, user_id)
        if report_type == ReportType.TRANSACTIONS:
            return self.transaction_history(db, user_id, start, end)
        if report_type == ReportType.MONTHLY:
            return self.monthly_trend(db, user_id)
        if report_type == ReportType.YEAR_OVER_YEAR:
            return self.year_over_year(db, user_id)
        return self.top_performing(db, user_id, start, end)

    def export(
            self,
            db: Session,
            user_id: int,
            report_type: ReportType,
            fmt: ExportFormat,
            start: date | None = None,
            end: date | None = None,
    ) -> ExportedReport:
        report = self.generate(db, user_id, report_type, start, end)
        exported = export_report(report, report_type, fmt, report.generated_at.strftime("%Y%m%d_%H%M%S"))
        logger.info(f"Exported {report_type.value} report for user {user_id} as {fmt.value}")
        return exported
