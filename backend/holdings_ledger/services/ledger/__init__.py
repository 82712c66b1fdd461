# backend/holdings_ledger/services/ledger/__init__.py
"""
Ledger Package.

Database-facing services for holdings, their append-only transaction
ledgers and portfolios:
- SqlLedgerStore: ordered reads, row locks
- HoldingService: holding lifecycle and filtered listing
- TransactionService: atomic posting and previews
- PortfolioService: grouping, per-portfolio statistics, update and soft delete
- LoggingActivityLogger: audit records of successful mutations

Usage:
    from holdings_ledger.services.ledger import SqlLedgerStore, TransactionService

    service = TransactionService(SqlLedgerStore())
    posted = service.create_transaction(db, user_id, holding_id, ...)
"""

from holdings_ledger.services.ledger.activity import LoggingActivityLogger, record_activity
from holdings_ledger.services.ledger.holdings import HoldingService
from holdings_ledger.services.ledger.portfolios import PortfolioService
from holdings_ledger.services.ledger.store import SqlLedgerStore
from holdings_ledger.services.ledger.transactions import TransactionService
from holdings_ledger.services.ledger.types import (
    CategoryCount,
    HoldingStats,
    PortfolioDeleteCheck,
    PortfolioStats,
    PortfolioSummary,
    PostedTransaction,
    TransactionPreview,
    TransactionTotals,
)

__all__ = [
    "SqlLedgerStore",
    "HoldingService",
    "TransactionService",
    "PortfolioService",
    "LoggingActivityLogger",
    "record_activity",
    "PostedTransaction",
    "TransactionPreview",
    "TransactionTotals",
    "CategoryCount",
    "HoldingStats",
    "PortfolioSummary",
    "PortfolioDeleteCheck",
    "PortfolioStats",
]
