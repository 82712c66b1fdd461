# backend/holdings_ledger/services/ledger/portfolios.py
"""
Portfolio Service: named groupings of a user's holdings.

A holding belongs to at most one portfolio. Portfolio totals are sums of
the cached current_value of their holdings; nothing here replays ledgers.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date

from sqlalchemy.orm import Session

from holdings_ledger.models import Holding, HoldingStatus, Portfolio
from holdings_ledger.schemas.portfolios import PortfolioCreate, PortfolioUpdate
from holdings_ledger.services.analytics import (
    DistributionCalculator,
    DistributionGroup,
    PerformanceRanker,
    RankDimension,
    RankDirection,
)
from holdings_ledger.services.analytics.returns import calculate_gain_loss_percentage
from holdings_ledger.services.constants import ZERO
from holdings_ledger.services.exceptions import (
    PermissionDeniedError,
    PortfolioNotEmptyError,
    PortfolioNotFoundError,
)
from holdings_ledger.services.ledger.activity import record_activity
from holdings_ledger.services.ledger.store import SqlLedgerStore
from holdings_ledger.services.ledger.types import PortfolioDeleteCheck, PortfolioStats, PortfolioSummary
from holdings_ledger.services.protocols import ActivityLogger

logger = logging.getLogger(__name__)


class PortfolioService:
    """
    Attributes:
        _store: Ledger store for reads
        _ranker: Picks the best and worst holding of a portfolio
        _distribution: Category allocation of a portfolio
        _activity: Optional audit sink (fire-and-forget)
    """

    def __init__(
            self,
            store: SqlLedgerStore,
            ranker: PerformanceRanker | None = None,
            distribution: DistributionCalculator | None = None,
            activity: ActivityLogger | None = None,
    ) -> None:
        self._store = store
        self._ranker = ranker or PerformanceRanker()
        self._distribution = distribution or DistributionCalculator()
        self._activity = activity

    def create_portfolio(self, db: Session, user_id: int, data: PortfolioCreate) -> Portfolio:
        """The user's first portfolio becomes the default."""
        is_first = self._store.count_portfolios(db, user_id) == 0

        portfolio = Portfolio(
            user_id=user_id,
            name=data.name,
            description=data.description,
            is_default=is_first,
        )
        db.add(portfolio)
        db.commit()
        db.refresh(portfolio)

        logger.info(f"Created portfolio {portfolio.id} '{portfolio.name}' for user {user_id}")
        record_activity(self._activity, user_id, "create", "Portfolio", portfolio.id, {"name": portfolio.name})
        return portfolio

    def list_portfolios(self, db: Session, user_id: int) -> list[PortfolioSummary]:
        portfolios = self._store.get_portfolios_for_owner(db, user_id)
        holdings = self._store.get_holdings_for_owner(db, user_id)

        by_portfolio: dict[int, list[Holding]] = defaultdict(list)
        for holding in holdings:
            if holding.portfolio_id is not None:
                by_portfolio[holding.portfolio_id].append(holding)

        return [
            PortfolioSummary(
                portfolio=portfolio,
                holding_count=len(by_portfolio[portfolio.id]),
                total_invested=sum((h.initial_amount for h in by_portfolio[portfolio.id]), ZERO),
                current_value=sum((h.current_value for h in by_portfolio[portfolio.id]), ZERO),
            )
            for portfolio in portfolios
        ]

    def get_portfolio_for_owner(self, db: Session, portfolio_id: int, user_id: int) -> Portfolio:
        """
        Raises:
            PortfolioNotFoundError: Missing or soft-deleted
            PermissionDeniedError: Owned by another user
        """
        portfolio = self._store.get_portfolio(db, portfolio_id)
        if portfolio is None:
            raise PortfolioNotFoundError(portfolio_id)
        if portfolio.user_id != user_id:
            raise PermissionDeniedError("Portfolio", portfolio_id)
        return portfolio

    def update_portfolio(
            self,
            db: Session,
            portfolio_id: int,
            user_id: int,
            data: PortfolioUpdate,
    ) -> Portfolio:
        """Replace name and description."""
        portfolio = self.get_portfolio_for_owner(db, portfolio_id, user_id)
        portfolio.name = data.name
        portfolio.description = data.description
        db.commit()
        db.refresh(portfolio)

        logger.info(f"Updated portfolio {portfolio_id} '{portfolio.name}'")
        record_activity(self._activity, user_id, "update", "Portfolio", portfolio_id, {"name": portfolio.name})
        return portfolio

    def can_delete_portfolio(self, db: Session, portfolio_id: int, user_id: int) -> PortfolioDeleteCheck:
        """A portfolio can be deleted once none of its holdings is left."""
        self.get_portfolio_for_owner(db, portfolio_id, user_id)
        holding_count = self._store.count_holdings_in_portfolio(db, portfolio_id)
        return PortfolioDeleteCheck(
            portfolio_id=portfolio_id,
            can_delete=holding_count == 0,
            holding_count=holding_count,
        )

    def delete_portfolio(self, db: Session, portfolio_id: int, user_id: int) -> None:
        """
        Soft delete.

        Raises:
            PortfolioNotEmptyError: Non-deleted holdings still reference it
        """
        portfolio = self.get_portfolio_for_owner(db, portfolio_id, user_id)
        holding_count = self._store.count_holdings_in_portfolio(db, portfolio_id)
        if holding_count > 0:
            logger.warning(f"Refused to delete portfolio {portfolio_id}: {holding_count} holding(s) left")
            raise PortfolioNotEmptyError(portfolio_id, holding_count)

        portfolio.is_deleted = True
        db.commit()

        logger.info(f"Soft-deleted portfolio {portfolio_id}")
        record_activity(self._activity, user_id, "delete", "Portfolio", portfolio_id, {"name": portfolio.name})

    def portfolio_stats(
            self,
            db: Session,
            portfolio_id: int,
            user_id: int,
            as_of: date | None = None,
    ) -> PortfolioStats:
        """
        Totals, status counts, best/worst holding by gain % and category
        allocation of one portfolio.

        Raises:
            PortfolioNotFoundError: Missing or soft-deleted
            PermissionDeniedError: Owned by another user
        """
        as_of = as_of or date.today()
        portfolio = self.get_portfolio_for_owner(db, portfolio_id, user_id)

        holdings = [
            h for h in self._store.get_holdings_for_owner(db, user_id)
            if h.portfolio_id == portfolio_id
        ]

        invested = sum((h.initial_amount for h in holdings), ZERO)
        current = sum((h.current_value for h in holdings), ZERO)
        status_counts = Counter(h.status for h in holdings)

        top = self._ranker.rank(holdings, RankDimension.PERCENTAGE, RankDirection.TOP, 1, as_of)
        worst = self._ranker.rank(holdings, RankDimension.PERCENTAGE, RankDirection.WORST, 1, as_of)

        return PortfolioStats(
            portfolio_id=portfolio.id,
            portfolio_name=portfolio.name,
            total_invested=invested,
            current_value=current,
            total_gain_loss=current - invested,
            total_gain_loss_percentage=calculate_gain_loss_percentage(invested, current),
            total_holdings=len(holdings),
            active_holdings=status_counts[HoldingStatus.ACTIVE],
            sold_holdings=status_counts[HoldingStatus.SOLD],
            on_hold_holdings=status_counts[HoldingStatus.ON_HOLD],
            best_performer=top[0].performance if top else None,
            worst_performer=worst[0].performance if worst else None,
            allocation=self._distribution.distribution(holdings, DistributionGroup.CATEGORY),
        )
