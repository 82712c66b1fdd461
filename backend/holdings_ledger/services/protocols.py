# backend/holdings_ledger/services/protocols.py
"""
Protocol interfaces for the engine inputs and service collaborators.

Using typing.Protocol enables structural subtyping:
- ORM rows (Holding, Transaction) satisfy the record protocols as-is
- Test fakes are plain dataclasses, no inheritance needed
- The ledger store and activity sink can be swapped in tests
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from holdings_ledger.models import (
        Holding,
        HoldingCategory,
        HoldingStatus,
        Portfolio,
        Transaction,
        TransactionType,
    )


# =============================================================================
# ENGINE RECORDS
# =============================================================================

class HoldingRecord(Protocol):
    """What the valuation, ranking and distribution code reads from a holding."""

    id: int
    name: str
    category: HoldingCategory
    status: HoldingStatus
    initial_amount: Decimal
    current_value: Decimal
    purchase_date: date


class TransactionRecord(Protocol):
    """What replay reads from a ledger entry."""

    id: int
    holding_id: int
    transaction_type: TransactionType
    amount: Decimal
    transaction_date: date


class TimestampedTransactionRecord(TransactionRecord, Protocol):
    """Ledger entry as shown in recent-activity lists."""

    quantity: Decimal
    price_per_unit: Decimal
    notes: str | None
    created_at: datetime


# =============================================================================
# COLLABORATORS
# =============================================================================

class LedgerStore(Protocol):
    """
    Read access to holdings and their ledgers.

    Every method excludes soft-deleted rows.
    """

    def get_holdings_for_owner(
            self, db: Session, user_id: int, include_deleted: bool = False
    ) -> list[Holding]:
        ...

    def get_holding(self, db: Session, holding_id: int) -> Holding | None:
        ...

    def get_transactions_for_holding(self, db: Session, holding_id: int) -> list[Transaction]:
        ...

    def get_transactions_for_owner(self, db: Session, user_id: int) -> list[Transaction]:
        ...

    def get_recent_transactions(self, db: Session, user_id: int, limit: int) -> list[Transaction]:
        ...

    def get_portfolios_for_owner(self, db: Session, user_id: int) -> list[Portfolio]:
        ...

    def get_portfolio(self, db: Session, portfolio_id: int) -> Portfolio | None:
        ...

    def count_portfolios(self, db: Session, user_id: int) -> int:
        ...

    def count_holdings_in_portfolio(self, db: Session, portfolio_id: int) -> int:
        ...


class ActivityLogger(Protocol):
    """Sink for audit records of successful mutations."""

    def record(self, user_id: int, action: str, entity: str, entity_id: int, details: dict[str, Any]) -> None:
        ...
