# backend/holdings_ledger/services/reports/snapshot.py
"""
One consistent read of a user's holdings and ledger.

Composers only ever see a LedgerSnapshot, so every number in one payload
is computed from the same set of rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from holdings_ledger.services.ledger.store import SqlLedgerStore
from holdings_ledger.services.protocols import HoldingRecord, TransactionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """
    Attributes:
        holdings: Non-deleted holdings, oldest purchase first
        transactions: Their ledgers flattened, in replay order
        portfolio_count: Non-deleted portfolios of the owner
    """

    holdings: list[HoldingRecord] = field(default_factory=list)
    transactions: list[TransactionRecord] = field(default_factory=list)
    portfolio_count: int = 0


def snapshot_isolation_level(dialect_name: str) -> str:
    """Isolation level that pins every read of a snapshot to one database snapshot."""
    # SQLite has no REPEATABLE READ; its SERIALIZABLE is the default and is stricter.
    return "SERIALIZABLE" if dialect_name == "sqlite" else "REPEATABLE READ"


def load_snapshot(db: Session, store: SqlLedgerStore, user_id: int) -> LedgerSnapshot:
    """
    Read holdings, ledger and portfolio count as of one database snapshot.

    The reads run in a dedicated session whose connection is opened at
    REPEATABLE READ, so a transaction committed between two of the SELECTs
    is either seen by all of them or by none. The caller's session (which
    may already be inside a READ COMMITTED transaction) is left untouched.
    Returned rows are detached; only their column attributes are read.
    """
    bind = db.get_bind()
    level = snapshot_isolation_level(bind.dialect.name)

    with Session(bind=bind) as snapshot_db:
        snapshot_db.connection(execution_options={"isolation_level": level})
        snapshot = LedgerSnapshot(
            holdings=store.get_holdings_for_owner(snapshot_db, user_id),
            transactions=store.get_transactions_for_owner(snapshot_db, user_id),
            portfolio_count=store.count_portfolios(snapshot_db, user_id),
        )
        snapshot_db.rollback()

    logger.debug(
        f"Loaded snapshot for user {user_id} at {level}: {len(snapshot.holdings)} holdings, "
        f"{len(snapshot.transactions)} transactions"
    )
    return snapshot
