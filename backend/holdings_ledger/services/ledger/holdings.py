# backend/holdings_ledger/services/ledger/holdings.py
"""
Holding Service: create, edit, soft-delete and query holdings.

Design Principles:
- No HTTP Knowledge: raises domain exceptions, not HTTPException
- Value fields are never edited directly; the ledger owns them
- Soft delete only, so historical replay keeps working

Usage:
    service = HoldingService(SqlLedgerStore())
    holding = service.create_holding(db, user_id=1, data=HoldingCreate(...))
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from holdings_ledger.models import Holding, HoldingCategory, HoldingStatus, Transaction, TransactionType
from holdings_ledger.schemas.holdings import HoldingCreate, HoldingFilterParams, HoldingUpdate
from holdings_ledger.services.analytics.returns import calculate_gain_loss_percentage
from holdings_ledger.services.constants import ZERO
from holdings_ledger.services.exceptions import (
    FutureDateError,
    HoldingNotFoundError,
    PermissionDeniedError,
    PortfolioNotFoundError,
)
from holdings_ledger.services.ledger.activity import record_activity
from holdings_ledger.services.ledger.store import SqlLedgerStore
from holdings_ledger.services.ledger.types import CategoryCount, HoldingStats, TransactionTotals
from holdings_ledger.services.protocols import ActivityLogger
from holdings_ledger.utils.sql import LIKE_ESCAPE_CHAR, contains_pattern

logger = logging.getLogger(__name__)

# Amounts are stored with 4 decimal places
AMOUNT_QUANTUM = Decimal("0.0001")

_SORT_COLUMNS = {
    "amount": Holding.initial_amount,
    "currentvalue": Holding.current_value,
    "gainloss": Holding.current_value - Holding.initial_amount,
    "purchasedate": Holding.purchase_date,
    "name": Holding.name,
}


class HoldingService:
    """
    Service for the holding lifecycle.

    Attributes:
        _store: Ledger store for reads
        _activity: Optional audit sink (fire-and-forget)
    """

    def __init__(self, store: SqlLedgerStore, activity: ActivityLogger | None = None) -> None:
        self._store = store
        self._activity = activity

    # =========================================================================
    # READS
    # =========================================================================

    def get_holding_for_owner(self, db: Session, holding_id: int, user_id: int) -> Holding:
        """
        Raises:
            HoldingNotFoundError: Missing or soft-deleted
            PermissionDeniedError: Owned by another user
        """
        holding = self._store.get_holding(db, holding_id)
        if holding is None:
            raise HoldingNotFoundError(holding_id)
        if holding.user_id != user_id:
            raise PermissionDeniedError("Holding", holding_id)
        return holding

    def list_holdings(
            self,
            db: Session,
            user_id: int,
            filters: HoldingFilterParams,
            skip: int = 0,
            limit: int = 20,
    ) -> tuple[list[Holding], int]:
        """
        Filtered, sorted page of the user's holdings.

        Returns:
            (holdings on this page, total matching count)
        """
        conditions = [Holding.user_id == user_id, Holding.is_deleted.is_(False)]

        if filters.status is not None:
            conditions.append(Holding.status == filters.status)
        if filters.category is not None:
            conditions.append(Holding.category == filters.category)
        if filters.portfolio_id is not None:
            conditions.append(Holding.portfolio_id == filters.portfolio_id)
        if filters.search:
            conditions.append(Holding.name.ilike(contains_pattern(filters.search), escape=LIKE_ESCAPE_CHAR))
        if filters.min_value is not None:
            conditions.append(Holding.current_value >= filters.min_value)
        if filters.max_value is not None:
            conditions.append(Holding.current_value <= filters.max_value)
        if filters.purchased_from is not None:
            conditions.append(Holding.purchase_date >= filters.purchased_from)
        if filters.purchased_to is not None:
            conditions.append(Holding.purchase_date <= filters.purchased_to)

        total = db.scalar(select(func.count(Holding.id)).where(*conditions)) or 0

        sort_column = _SORT_COLUMNS[filters.sort_by]
        ordering = sort_column.desc() if filters.descending else sort_column.asc()

        query = (
            select(Holding)
            .where(*conditions)
            .order_by(ordering, Holding.id)
            .offset(skip)
            .limit(limit)
        )
        return list(db.scalars(query).all()), total

    def holding_stats(self, db: Session, user_id: int) -> HoldingStats:
        """Counts by status and category, invested and current totals."""
        holdings = self._store.get_holdings_for_owner(db, user_id)

        status_counts = Counter(h.status for h in holdings)
        invested = sum((h.initial_amount for h in holdings), ZERO)
        current = sum((h.current_value for h in holdings), ZERO)

        by_category: dict[HoldingCategory, list[Holding]] = defaultdict(list)
        for holding in holdings:
            by_category[holding.category].append(holding)

        category_counts = sorted(
            (
                CategoryCount(
                    category=category,
                    count=len(members),
                    total_value=sum((h.current_value for h in members), ZERO),
                )
                for category, members in by_category.items()
            ),
            key=lambda c: (-c.total_value, c.category.value),
        )

        return HoldingStats(
            total_holdings=len(holdings),
            active_holdings=status_counts[HoldingStatus.ACTIVE],
            sold_holdings=status_counts[HoldingStatus.SOLD],
            on_hold_holdings=status_counts[HoldingStatus.ON_HOLD],
            total_invested=invested,
            total_current_value=current,
            total_gain_loss=current - invested,
            total_gain_loss_percentage=calculate_gain_loss_percentage(invested, current),
            by_category=category_counts,
        )

    def transaction_totals(self, db: Session, holding: Holding) -> TransactionTotals:
        """Ledger counts and volumes for the holding detail view."""
        ledger: list[Transaction] = self._store.get_transactions_for_holding(db, holding.id)
        counts = Counter(t.transaction_type for t in ledger)
        last = ledger[-1] if ledger else None

        return TransactionTotals(
            total_transactions=len(ledger),
            buy_count=counts[TransactionType.BUY],
            sell_count=counts[TransactionType.SELL],
            update_count=counts[TransactionType.UPDATE],
            total_bought=sum((t.amount for t in ledger if t.transaction_type == TransactionType.BUY), ZERO),
            total_sold=sum((t.amount for t in ledger if t.transaction_type == TransactionType.SELL), ZERO),
            last_transaction_date=last.transaction_date if last else None,
            last_transaction_type=last.transaction_type if last else None,
        )

    # =========================================================================
    # WRITES
    # =========================================================================

    def create_holding(
            self,
            db: Session,
            user_id: int,
            data: HoldingCreate,
            today: date | None = None,
    ) -> Holding:
        """
        Open a holding with current_value = initial_amount.

        Raises:
            FutureDateError: purchase_date after today
            PortfolioNotFoundError / PermissionDeniedError: bad portfolio_id
        """
        today = today or date.today()
        if data.purchase_date > today:
            raise FutureDateError("purchase_date", data.purchase_date, today)

        if data.portfolio_id is not None:
            self._check_portfolio(db, data.portfolio_id, user_id)

        initial_amount = data.initial_amount.quantize(AMOUNT_QUANTUM)
        holding = Holding(
            user_id=user_id,
            portfolio_id=data.portfolio_id,
            name=data.name,
            category=data.category,
            status=data.status,
            initial_amount=initial_amount,
            current_value=initial_amount,
            quantity=data.quantity,
            average_price_per_unit=data.average_price_per_unit,
            purchase_date=data.purchase_date,
            broker_platform=data.broker_platform,
            notes=data.notes,
        )
        db.add(holding)
        db.commit()
        db.refresh(holding)

        logger.info(
            f"Created holding {holding.id} '{holding.name}' ({holding.category.value}) "
            f"for user {user_id}: initial_amount={initial_amount}"
        )
        record_activity(
            self._activity, user_id, "create", "Holding", holding.id,
            {"name": holding.name, "initial_amount": str(initial_amount)},
        )
        return holding

    def update_holding(
            self,
            db: Session,
            holding_id: int,
            user_id: int,
            data: HoldingUpdate,
    ) -> Holding:
        """Apply the fields present in `data`; value fields are untouched."""
        holding = self.get_holding_for_owner(db, holding_id, user_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("portfolio_id") is not None:
            self._check_portfolio(db, changes["portfolio_id"], user_id)

        for field_name, value in changes.items():
            if field_name in ("name", "category", "status") and value is None:
                continue
            setattr(holding, field_name, value)

        db.commit()
        db.refresh(holding)

        logger.info(f"Updated holding {holding_id}: fields={sorted(changes)}")
        record_activity(self._activity, user_id, "update", "Holding", holding_id, {"fields": sorted(changes)})
        return holding

    def delete_holding(self, db: Session, holding_id: int, user_id: int) -> None:
        """Soft delete. The ledger rows are kept."""
        holding = self.get_holding_for_owner(db, holding_id, user_id)
        holding.is_deleted = True
        db.commit()

        logger.info(f"Soft-deleted holding {holding_id}")
        record_activity(self._activity, user_id, "delete", "Holding", holding_id)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _check_portfolio(self, db: Session, portfolio_id: int, user_id: int) -> None:
        portfolio = self._store.get_portfolio(db, portfolio_id)
        if portfolio is None:
            raise PortfolioNotFoundError(portfolio_id)
        if portfolio.user_id != user_id:
            raise PermissionDeniedError("Portfolio", portfolio_id)
