# tests/services/ledger/test_portfolio_service.py
"""
Tests for PortfolioService.
"""

from datetime import date
from decimal import Decimal

import pytest

from holdings_ledger.models import HoldingCategory, HoldingStatus, Portfolio
from holdings_ledger.schemas.portfolios import PortfolioCreate, PortfolioUpdate
from holdings_ledger.services.exceptions import (
    PermissionDeniedError,
    PortfolioNotEmptyError,
    PortfolioNotFoundError,
)
from holdings_ledger.services.ledger import PortfolioService, SqlLedgerStore
from tests.conftest import create_holding, create_portfolio

AS_OF = date(2024, 12, 31)


@pytest.fixture
def service() -> PortfolioService:
    return PortfolioService(SqlLedgerStore())


class TestCreatePortfolio:

    def test_first_portfolio_is_default(self, service, db, sample_user):
        first = service.create_portfolio(db, sample_user.id, PortfolioCreate(name="Retirement"))
        second = service.create_portfolio(db, sample_user.id, PortfolioCreate(name="Speculative"))

        assert first.is_default is True
        assert second.is_default is False

    def test_default_is_per_user(self, service, db, sample_user, other_user):
        service.create_portfolio(db, sample_user.id, PortfolioCreate(name="Mine"))

        theirs = service.create_portfolio(db, other_user.id, PortfolioCreate(name="Theirs"))

        assert theirs.is_default is True


class TestListPortfolios:

    def test_totals_per_portfolio(self, service, db, sample_user):
        growth = create_portfolio(db, sample_user, name="Growth")
        empty = create_portfolio(db, sample_user, name="Empty")
        create_holding(db, sample_user, initial_amount="1000", current_value="1200", portfolio=growth)
        create_holding(db, sample_user, initial_amount="500", current_value="400", portfolio=growth)
        create_holding(db, sample_user, initial_amount="700")

        summaries = service.list_portfolios(db, sample_user.id)

        assert [s.portfolio.id for s in summaries] == [growth.id, empty.id]
        assert summaries[0].holding_count == 2
        assert summaries[0].total_invested == Decimal("1500")
        assert summaries[0].current_value == Decimal("1600")
        assert summaries[1].holding_count == 0
        assert summaries[1].current_value == Decimal("0")

    def test_deleted_holdings_not_counted(self, service, db, sample_user):
        portfolio = create_portfolio(db, sample_user)
        holding = create_holding(db, sample_user, portfolio=portfolio)
        holding.is_deleted = True
        db.commit()

        summaries = service.list_portfolios(db, sample_user.id)

        assert summaries[0].holding_count == 0


class TestPortfolioStats:

    def test_stats(self, service, db, sample_user):
        portfolio = create_portfolio(db, sample_user, name="Core")
        create_holding(db, sample_user, name="Winner", initial_amount="1000", current_value="1500",
                       portfolio=portfolio)
        create_holding(db, sample_user, name="Loser", initial_amount="1000", current_value="800",
                       category=HoldingCategory.CRYPTO, status=HoldingStatus.SOLD, portfolio=portfolio)
        create_holding(db, sample_user, name="Elsewhere", initial_amount="9999")

        stats = service.portfolio_stats(db, portfolio.id, sample_user.id, as_of=AS_OF)

        assert stats.portfolio_name == "Core"
        assert stats.total_holdings == 2
        assert stats.active_holdings == 1
        assert stats.sold_holdings == 1
        assert stats.total_invested == Decimal("2000")
        assert stats.current_value == Decimal("2300")
        assert stats.total_gain_loss_percentage == Decimal("15")
        assert stats.best_performer.name == "Winner"
        assert stats.worst_performer.name == "Loser"
        assert [b.name for b in stats.allocation] == ["Stocks", "Crypto"]

    def test_empty_portfolio(self, service, db, sample_user):
        portfolio = create_portfolio(db, sample_user)

        stats = service.portfolio_stats(db, portfolio.id, sample_user.id, as_of=AS_OF)

        assert stats.total_holdings == 0
        assert stats.best_performer is None
        assert stats.worst_performer is None
        assert stats.allocation == []

    def test_missing(self, service, db, sample_user):
        with pytest.raises(PortfolioNotFoundError):
            service.portfolio_stats(db, 77, sample_user.id, as_of=AS_OF)

    def test_foreign(self, service, db, sample_user, other_user):
        portfolio = create_portfolio(db, other_user)

        with pytest.raises(PermissionDeniedError):
            service.portfolio_stats(db, portfolio.id, sample_user.id, as_of=AS_OF)


class TestUpdatePortfolio:

    def test_replaces_name_and_description(self, service, db, sample_user):
        portfolio = service.create_portfolio(
            db, sample_user.id, PortfolioCreate(name="Retirement", description="Long term")
        )

        updated = service.update_portfolio(
            db, portfolio.id, sample_user.id, PortfolioUpdate(name="  Pension  ")
        )

        assert updated.name == "Pension"
        assert updated.description is None
        assert updated.is_default is True

    def test_foreign(self, service, db, sample_user, other_user):
        portfolio = create_portfolio(db, other_user)

        with pytest.raises(PermissionDeniedError):
            service.update_portfolio(db, portfolio.id, sample_user.id, PortfolioUpdate(name="Mine now"))

    def test_deleted_portfolio_not_found(self, service, db, sample_user):
        portfolio = create_portfolio(db, sample_user)
        service.delete_portfolio(db, portfolio.id, sample_user.id)

        with pytest.raises(PortfolioNotFoundError):
            service.update_portfolio(db, portfolio.id, sample_user.id, PortfolioUpdate(name="Revived"))


class TestDeletePortfolio:
    """Soft delete, refused while holdings remain."""

    def test_empty_portfolio_soft_deleted(self, service, db, sample_user):
        portfolio = create_portfolio(db, sample_user, name="Empty")

        service.delete_portfolio(db, portfolio.id, sample_user.id)

        row = db.get(Portfolio, portfolio.id)
        assert row is not None
        assert row.is_deleted is True
        assert service.list_portfolios(db, sample_user.id) == []

    def test_refused_while_holdings_remain(self, service, db, sample_user):
        portfolio = create_portfolio(db, sample_user, name="Core")
        create_holding(db, sample_user, portfolio=portfolio)
        create_holding(db, sample_user, portfolio=portfolio)

        with pytest.raises(PortfolioNotEmptyError) as exc_info:
            service.delete_portfolio(db, portfolio.id, sample_user.id)

        assert exc_info.value.holding_count == 2
        db.refresh(portfolio)
        assert portfolio.is_deleted is False

    def test_deleted_holdings_do_not_block(self, service, db, sample_user):
        portfolio = create_portfolio(db, sample_user, name="Core")
        holding = create_holding(db, sample_user, portfolio=portfolio)
        holding.is_deleted = True
        db.commit()

        service.delete_portfolio(db, portfolio.id, sample_user.id)

        assert db.get(Portfolio, portfolio.id).is_deleted is True

    def test_foreign(self, service, db, sample_user, other_user):
        portfolio = create_portfolio(db, other_user)

        with pytest.raises(PermissionDeniedError):
            service.delete_portfolio(db, portfolio.id, sample_user.id)

    def test_can_delete(self, service, db, sample_user):
        empty = create_portfolio(db, sample_user, name="Empty")
        full = create_portfolio(db, sample_user, name="Full")
        create_holding(db, sample_user, portfolio=full)

        assert service.can_delete_portfolio(db, empty.id, sample_user.id).can_delete is True
        check = service.can_delete_portfolio(db, full.id, sample_user.id)
        assert check.can_delete is False
        assert check.holding_count == 1

    def test_can_delete_missing(self, service, db, sample_user):
        with pytest.raises(PortfolioNotFoundError):
            service.can_delete_portfolio(db, 404, sample_user.id)
