# backend/holdings_ledger/services/ledger/store.py
"""
SQLAlchemy implementation of the LedgerStore protocol.

All reads exclude soft-deleted holdings and portfolios. Transactions of a
soft-deleted holding are excluded from owner-wide reads as well.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from holdings_ledger.models import Holding, Portfolio, Transaction

logger = logging.getLogger(__name__)


class SqlLedgerStore:
    """Ordered retrieval of holdings and ledgers by owner or holding."""

    def get_holdings_for_owner(
            self,
            db: Session,
            user_id: int,
            include_deleted: bool = False,
    ) -> list[Holding]:
        query = select(Holding).where(Holding.user_id == user_id)
        if not include_deleted:
            query = query.where(Holding.is_deleted.is_(False))
        query = query.order_by(Holding.purchase_date, Holding.id)
        return list(db.scalars(query).all())

    def get_holding(self, db: Session, holding_id: int) -> Holding | None:
        query = select(Holding).where(Holding.id == holding_id, Holding.is_deleted.is_(False))
        return db.scalar(query)

    def lock_holding(self, db: Session, holding_id: int) -> Holding | None:
        """
        Fetch a holding with a row lock (SELECT ... FOR UPDATE).

        The lock is held until the caller commits or rolls back, which
        serializes concurrent writers on the same holding.
        """
        query = (
            select(Holding)
            .where(Holding.id == holding_id, Holding.is_deleted.is_(False))
            .with_for_update()
        )
        return db.scalar(query)

    def get_transactions_for_holding(self, db: Session, holding_id: int) -> list[Transaction]:
        query = (
            select(Transaction)
            .where(Transaction.holding_id == holding_id)
            .order_by(Transaction.transaction_date, Transaction.id)
        )
        return list(db.scalars(query).all())

    def get_transactions_for_owner(self, db: Session, user_id: int) -> list[Transaction]:
        query = (
            select(Transaction)
            .join(Holding, Transaction.holding_id == Holding.id)
            .options(joinedload(Transaction.holding))
            .where(Holding.user_id == user_id, Holding.is_deleted.is_(False))
            .order_by(Transaction.transaction_date, Transaction.id)
        )
        return list(db.scalars(query).all())

    def get_recent_transactions(self, db: Session, user_id: int, limit: int) -> list[Transaction]:
        """Newest recorded first (created_at, then id)."""
        query = (
            select(Transaction)
            .join(Holding, Transaction.holding_id == Holding.id)
            .options(joinedload(Transaction.holding))
            .where(Holding.user_id == user_id, Holding.is_deleted.is_(False))
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return list(db.scalars(query).all())

    def get_portfolios_for_owner(self, db: Session, user_id: int) -> list[Portfolio]:
        query = (
            select(Portfolio)
            .where(Portfolio.user_id == user_id, Portfolio.is_deleted.is_(False))
            .order_by(Portfolio.id)
        )
        return list(db.scalars(query).all())

    def get_portfolio(self, db: Session, portfolio_id: int) -> Portfolio | None:
        query = select(Portfolio).where(Portfolio.id == portfolio_id, Portfolio.is_deleted.is_(False))
        return db.scalar(query)

    def count_portfolios(self, db: Session, user_id: int) -> int:
        query = (
            select(func.count(Portfolio.id))
            .where(Portfolio.user_id == user_id, Portfolio.is_deleted.is_(False))
        )
        return db.scalar(query) or 0

    def count_holdings_in_portfolio(self, db: Session, portfolio_id: int) -> int:
        query = (
            select(func.count(Holding.id))
            .where(Holding.portfolio_id == portfolio_id, Holding.is_deleted.is_(False))
        )
        return db.scalar(query) or 0
