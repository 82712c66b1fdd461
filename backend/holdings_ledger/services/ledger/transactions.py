# backend/holdings_ledger/services/ledger/transactions.py
"""
Transaction Service: the only writer of a holding's current_value.

Posting a ledger entry is one database transaction:

    1. Lock the holding row (SELECT ... FOR UPDATE)
    2. Validate (ownership, date, Update rules, Sell cover)
    3. Append the entry
    4. Recompute current_value by replaying the full ledger; a negative
       result rejects the entry
    5. Commit; any failure rolls back both writes

Because step 4 replays instead of adjusting in place, a back-dated entry
lands in its chronological position and the cached value always equals
value_at(holding, ledger, today).

Usage:
    service = TransactionService(SqlLedgerStore(), ValuationCalculator())
    posted = service.create_transaction(
        db, user_id=1, holding_id=7,
        transaction_type=TransactionType.SELL,
        quantity=Decimal("3"), price_per_unit=Decimal("100"),
        transaction_date=date(2024, 6, 20),
    )
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from holdings_ledger.models import Holding, Transaction, TransactionType
from holdings_ledger.schemas.transactions import TransactionFilterParams
from holdings_ledger.services.analytics.returns import calculate_gain_loss_percentage
from holdings_ledger.services.exceptions import (
    FutureDateError,
    HoldingNotFoundError,
    InsufficientValueError,
    InvalidDateRangeError,
    InvalidUpdateError,
    PermissionDeniedError,
    ServiceError,
    TransactionNotFoundError,
)
from holdings_ledger.services.ledger.activity import record_activity
from holdings_ledger.services.ledger.holdings import AMOUNT_QUANTUM
from holdings_ledger.services.ledger.store import SqlLedgerStore
from holdings_ledger.services.ledger.types import PostedTransaction, TransactionPreview
from holdings_ledger.services.protocols import ActivityLogger
from holdings_ledger.services.valuation.calculators import ValuationCalculator, ledger_order
from holdings_ledger.utils.sql import LIKE_ESCAPE_CHAR, contains_pattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingEntry:
    """Not-yet-persisted entry; sorts after every stored entry on its date."""

    holding_id: int
    transaction_type: TransactionType
    amount: Decimal
    transaction_date: date
    id: int = sys.maxsize


def _last_update(ledger: list[Transaction]) -> Transaction | None:
    """Latest Update in replay order; it owns the holding's quantity and unit price."""
    updates = [t for t in ledger if t.transaction_type == TransactionType.UPDATE]
    return max(updates, key=ledger_order) if updates else None


def _rejected_preview(
        holding_id: int,
        transaction_type: TransactionType,
        current: Decimal,
        amount: Decimal,
        message: str,
) -> TransactionPreview:
    return TransactionPreview(
        holding_id=holding_id,
        transaction_type=transaction_type,
        current_value=current,
        amount=amount,
        new_value=current,
        change=Decimal("0"),
        change_percentage=Decimal("0"),
        is_valid=False,
        message=message,
    )


class TransactionService:
    """
    Append-only ledger writes and reads.

    Attributes:
        _store: Ledger store (also provides the row lock)
        _calc: Replay engine used for the cached value
        _activity: Optional audit sink (fire-and-forget)
    """

    def __init__(
            self,
            store: SqlLedgerStore,
            calculator: ValuationCalculator | None = None,
            activity: ActivityLogger | None = None,
    ) -> None:
        self._store = store
        self._calc = calculator or ValuationCalculator()
        self._activity = activity

    # =========================================================================
    # WRITES
    # =========================================================================

    def create_transaction(
            self,
            db: Session,
            user_id: int,
            holding_id: int,
            transaction_type: TransactionType,
            quantity: Decimal,
            price_per_unit: Decimal,
            transaction_date: date,
            notes: str | None = None,
            today: date | None = None,
    ) -> PostedTransaction:
        """
        Append a ledger entry and recompute the holding's value.

        Raises:
            HoldingNotFoundError: Missing or soft-deleted holding
            PermissionDeniedError: Holding owned by another user
            FutureDateError: transaction_date after today
            InvalidUpdateError: Update with non-positive quantity or price
            InsufficientValueError: Sell amount above the current value
        """
        today = today or date.today()

        try:
            holding = self._store.lock_holding(db, holding_id)
            if holding is None:
                raise HoldingNotFoundError(holding_id)
            if holding.user_id != user_id:
                raise PermissionDeniedError("Holding", holding_id)

            amount = self._validate(transaction_type, quantity, price_per_unit, transaction_date, today)

            ledger = self._store.get_transactions_for_holding(db, holding_id)
            before = self._calc.value_at(holding, ledger, today).value

            if transaction_type == TransactionType.SELL and amount > before:
                logger.warning(
                    f"Rejected sell on holding {holding_id}: amount={amount} exceeds value={before}"
                )
                raise InsufficientValueError(holding_id, before, amount)

            transaction = Transaction(
                holding_id=holding_id,
                transaction_type=transaction_type,
                quantity=quantity,
                price_per_unit=price_per_unit,
                amount=amount,
                transaction_date=transaction_date,
                notes=notes,
            )
            db.add(transaction)
            db.flush()

            ledger = self._store.get_transactions_for_holding(db, holding_id)
            after = self._calc.value_at(holding, ledger, today).value
            if after < 0:
                logger.warning(
                    f"Rejected {transaction_type.value} on holding {holding_id}: "
                    f"replay would leave value={after}"
                )
                raise InsufficientValueError(holding_id, before, amount, resulting_value=after)
            holding.current_value = after

            last_update = _last_update(ledger)
            if last_update is not None:
                holding.quantity = last_update.quantity
                holding.average_price_per_unit = last_update.price_per_unit

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(transaction)
        db.refresh(holding)

        logger.info(
            f"Posted {transaction_type.value} {transaction.id} on holding {holding_id}: "
            f"amount={amount}, value {before} -> {holding.current_value}"
        )
        record_activity(
            self._activity, user_id, "create", "Transaction", transaction.id,
            {
                "holding_id": holding_id,
                "transaction_type": transaction_type.value,
                "amount": str(amount),
            },
        )
        return PostedTransaction(transaction=transaction, holding=holding)

    # =========================================================================
    # READS
    # =========================================================================

    def preview_transaction(
            self,
            db: Session,
            user_id: int,
            holding_id: int,
            transaction_type: TransactionType,
            quantity: Decimal,
            price_per_unit: Decimal,
            transaction_date: date,
            today: date | None = None,
    ) -> TransactionPreview:
        """
        What create_transaction would do, without writing.

        Validation failures are reported through is_valid/message rather
        than raised; missing or foreign holdings still raise.
        """
        today = today or date.today()
        holding = self._get_owned_holding(db, holding_id, user_id)
        ledger = self._store.get_transactions_for_holding(db, holding_id)
        current = self._calc.value_at(holding, ledger, today).value
        amount = (quantity * price_per_unit).quantize(AMOUNT_QUANTUM)

        try:
            amount = self._validate(transaction_type, quantity, price_per_unit, transaction_date, today)
            if transaction_type == TransactionType.SELL and amount > current:
                raise InsufficientValueError(holding_id, current, amount)
        except ServiceError as e:
            return _rejected_preview(holding_id, transaction_type, current, amount, e.message)

        pending = _PendingEntry(
            holding_id=holding_id,
            transaction_type=transaction_type,
            amount=amount,
            transaction_date=transaction_date,
        )
        new_value = self._calc.value_at(holding, [*ledger, pending], today).value
        if new_value < 0:
            return _rejected_preview(
                holding_id, transaction_type, current, amount,
                InsufficientValueError(holding_id, current, amount, resulting_value=new_value).message,
            )

        return TransactionPreview(
            holding_id=holding_id,
            transaction_type=transaction_type,
            current_value=current,
            amount=amount,
            new_value=new_value,
            change=new_value - current,
            change_percentage=calculate_gain_loss_percentage(current, new_value),
            is_valid=True,
        )

    def list_for_holding(
            self,
            db: Session,
            user_id: int,
            holding_id: int,
            skip: int = 0,
            limit: int = 50,
    ) -> tuple[list[Transaction], int]:
        """Newest first (transaction date, then id)."""
        self._get_owned_holding(db, holding_id, user_id)

        total = db.scalar(
            select(func.count(Transaction.id)).where(Transaction.holding_id == holding_id)
        ) or 0
        query = (
            select(Transaction)
            .where(Transaction.holding_id == holding_id)
            .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(db.scalars(query).all()), total

    def list_for_owner(
            self,
            db: Session,
            user_id: int,
            filters: TransactionFilterParams,
            skip: int = 0,
            limit: int = 50,
    ) -> tuple[list[Transaction], int]:
        """
        Filtered page of the user's ledger across all non-deleted holdings.

        Sorted by transaction date or amount, id breaking ties in the same
        direction.

        Raises:
            InvalidDateRangeError: start_date after end_date
        """
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise InvalidDateRangeError("start_date must not be after end_date", field="start_date")

        conditions = [Holding.user_id == user_id, Holding.is_deleted.is_(False)]

        if filters.holding_id is not None:
            conditions.append(Transaction.holding_id == filters.holding_id)
        if filters.transaction_type is not None:
            conditions.append(Transaction.transaction_type == filters.transaction_type)
        if filters.start_date is not None:
            conditions.append(Transaction.transaction_date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Transaction.transaction_date <= filters.end_date)
        if filters.search:
            conditions.append(Holding.name.ilike(contains_pattern(filters.search), escape=LIKE_ESCAPE_CHAR))

        total = db.scalar(
            select(func.count(Transaction.id))
            .join(Holding, Transaction.holding_id == Holding.id)
            .where(*conditions)
        ) or 0

        sort_column = Transaction.amount if filters.sort_by == "amount" else Transaction.transaction_date
        if filters.descending:
            ordering = (sort_column.desc(), Transaction.id.desc())
        else:
            ordering = (sort_column.asc(), Transaction.id.asc())

        query = (
            select(Transaction)
            .join(Holding, Transaction.holding_id == Holding.id)
            .where(*conditions)
            .order_by(*ordering)
            .offset(skip)
            .limit(limit)
        )
        return list(db.scalars(query).all()), total

    def recent_for_owner(self, db: Session, user_id: int, count: int) -> list[Transaction]:
        """Most recently recorded entries first."""
        return self._store.get_recent_transactions(db, user_id, count)

    def get_transaction(self, db: Session, transaction_id: int, user_id: int) -> Transaction:
        transaction = db.get(Transaction, transaction_id)
        if transaction is None or transaction.holding.is_deleted:
            raise TransactionNotFoundError(transaction_id)
        if transaction.holding.user_id != user_id:
            raise PermissionDeniedError("Transaction", transaction_id)
        return transaction

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _get_owned_holding(self, db: Session, holding_id: int, user_id: int) -> Holding:
        holding = self._store.get_holding(db, holding_id)
        if holding is None:
            raise HoldingNotFoundError(holding_id)
        if holding.user_id != user_id:
            raise PermissionDeniedError("Holding", holding_id)
        return holding

    @staticmethod
    def _validate(
            transaction_type: TransactionType,
            quantity: Decimal,
            price_per_unit: Decimal,
            transaction_date: date,
            today: date,
    ) -> Decimal:
        """Check the entry on its own and return its amount."""
        if transaction_date > today:
            raise FutureDateError("transaction_date", transaction_date, today)

        if transaction_type == TransactionType.UPDATE:
            if quantity <= 0:
                raise InvalidUpdateError("quantity")
            if price_per_unit <= 0:
                raise InvalidUpdateError("price_per_unit")

        return (quantity * price_per_unit).quantize(AMOUNT_QUANTUM)
