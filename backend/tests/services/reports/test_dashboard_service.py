# tests/services/reports/test_dashboard_service.py
"""
Tests for DashboardComposer and DashboardService.

Uses the seeded reporting ledger (see tests.conftest.seed_reporting_ledger)
valued as of 2024-03-31:

    Growth Fund  1000 -> 1800  (+80%)
    Bond Ladder  2000 -> 1800  (-10%)
    Old Coin      500 ->  250  (-50%, Sold)
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from holdings_ledger.services.ledger import SqlLedgerStore
from holdings_ledger.services.reports import DashboardComposer, DashboardService, load_snapshot
from tests.conftest import seed_reporting_ledger

AS_OF = date(2024, 3, 31)
NOW = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> SqlLedgerStore:
    return SqlLedgerStore()


@pytest.fixture
def composer() -> DashboardComposer:
    return DashboardComposer()


@pytest.fixture
def snapshot(db, sample_user, store):
    seed_reporting_ledger(db, sample_user)
    return load_snapshot(db, store, sample_user.id)


class TestSummaryCards:

    def test_totals(self, composer, snapshot):
        cards = composer.summary_cards(snapshot, AS_OF)

        assert cards.total_value == Decimal("3850.00")
        assert cards.total_invested == Decimal("3500.00")
        assert cards.total_gain_loss == Decimal("350.00")
        assert cards.total_gain_loss_percentage == Decimal("10.00")
        assert cards.active_holdings == 2
        assert cards.total_holdings == 3
        assert cards.total_transactions == 4
        assert cards.last_transaction_date == date(2024, 3, 20)
        assert cards.portfolio_count == 0

    def test_best_and_worst(self, composer, snapshot):
        cards = composer.summary_cards(snapshot, AS_OF)

        assert cards.best_performer.name == "Growth Fund"
        assert cards.best_performer.gain_loss_percentage == Decimal("80.00")
        assert cards.worst_performer.name == "Old Coin"

    def test_empty_snapshot(self, composer, db, sample_user, store):
        cards = composer.summary_cards(load_snapshot(db, store, sample_user.id), AS_OF)

        assert cards.total_value == Decimal("0.00")
        assert cards.total_gain_loss_percentage == Decimal("0.00")
        assert cards.best_performer is None
        assert cards.last_transaction_date is None


class TestCharts:

    def test_performance_chart(self, composer, snapshot):
        chart = composer.performance_chart(snapshot, AS_OF, months=3)

        assert chart.labels == ["Jan 2024", "Feb 2024", "Mar 2024"]
        assert chart.values == [Decimal("1250.00"), Decimal("3750.00"), Decimal("3850.00")]
        assert chart.invested_values == [Decimal("1500.00"), Decimal("3500.00"), Decimal("3500.00")]
        assert chart.start_value == Decimal("250.00")
        assert chart.current_value == Decimal("3850.00")
        assert chart.total_growth == Decimal("3600.00")
        assert chart.months_covered == 3
        assert chart.period_start == date(2024, 1, 1)
        assert chart.period_end == date(2024, 3, 31)

    def test_chart_end_matches_cached_total(self, composer, snapshot):
        """Replaying to today agrees with the sum of cached values."""
        chart = composer.performance_chart(snapshot, AS_OF, months=1)
        cards = composer.summary_cards(snapshot, AS_OF)

        assert chart.current_value == cards.total_value

    def test_monthly_performance(self, composer, snapshot):
        months = composer.monthly_performance(snapshot, AS_OF, months=3)

        assert [m.month for m in months] == ["Jan 2024", "Feb 2024", "Mar 2024"]
        assert months[0].growth_percentage == Decimal("400.00")
        assert months[1].growth == Decimal("2500.00")
        assert months[2].growth_percentage == Decimal("2.67")
        assert months[2].transaction_count == 2


class TestBreakdowns:

    def test_asset_allocation_active_only(self, composer, snapshot):
        allocation = composer.asset_allocation(snapshot.holdings)

        assert allocation.labels == ["Bonds", "Stocks"]
        assert allocation.total_value == Decimal("3600.00")
        assert allocation.total_holdings == 2
        assert [item.percentage for item in allocation.items] == [Decimal("50.00"), Decimal("50.00")]

    def test_portfolio_breakdown(self, composer, snapshot):
        breakdown = composer.portfolio_breakdown(snapshot.holdings)

        assert breakdown.active_holdings == 2
        assert breakdown.sold_holdings == 1
        assert breakdown.on_hold_holdings == 0
        assert breakdown.active_value == Decimal("3600.00")
        assert breakdown.sold_value == Decimal("250.00")
        assert breakdown.on_hold_value == Decimal("0.00")

    def test_top_and_worst_performers(self, composer, snapshot):
        top = composer.top_performers(snapshot.holdings, AS_OF, count=2)
        worst = composer.worst_performers(snapshot.holdings, AS_OF, count=5)

        assert [p.name for p in top] == ["Growth Fund", "Bond Ladder"]
        assert [p.rank for p in top] == [1, 2]
        assert [p.name for p in worst] == ["Old Coin", "Bond Ladder", "Growth Fund"]


class TestQuickStats:

    def test_month_to_date(self, composer, snapshot):
        stats = composer.quick_stats(snapshot, AS_OF)

        assert stats.today_gain_loss == Decimal("0.00")
        assert stats.month_growth == Decimal("100.00")
        assert stats.month_growth_percentage == Decimal("2.67")
        assert stats.transactions_this_month == 2

    def test_day_over_day(self, composer, snapshot):
        stats = composer.quick_stats(snapshot, date(2024, 3, 20))

        assert stats.today_gain_loss == Decimal("-200.00")


class TestDashboardService:

    def test_full_dashboard(self, db, sample_user, store):
        seed_reporting_ledger(db, sample_user)
        service = DashboardService(store)

        dashboard = service.dashboard(db, sample_user.id, as_of=AS_OF, now=NOW)

        assert dashboard.summary_cards.total_value == Decimal("3850.00")
        assert dashboard.performance_chart.months_covered == 12
        assert len(dashboard.monthly_performance) == 12
        assert len(dashboard.recent_transactions) == 4
        assert dashboard.generated_at == NOW

    def test_recent_transactions_carry_holding(self, db, sample_user, store):
        seed_reporting_ledger(db, sample_user)
        service = DashboardService(store)

        recent = service.composer.recent_transactions(
            service.recent(db, sample_user.id, limit=2), datetime.now(timezone.utc)
        )

        assert len(recent) == 2
        assert recent[0].holding_name in {"Growth Fund", "Bond Ladder", "Old Coin"}
        assert recent[0].time_ago == "just now"

    def test_only_own_data(self, db, sample_user, other_user, store):
        seed_reporting_ledger(db, other_user)

        dashboard = DashboardService(store).dashboard(db, sample_user.id, as_of=AS_OF, now=NOW)

        assert dashboard.summary_cards.total_holdings == 0
        assert dashboard.recent_transactions == []
