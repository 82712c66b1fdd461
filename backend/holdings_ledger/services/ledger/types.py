# backend/holdings_ledger/services/ledger/types.py
"""
Result types returned by the ledger services.

Plain dataclasses; routers validate them into the response schemas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from holdings_ledger.models import HoldingCategory, TransactionType

if TYPE_CHECKING:
    from holdings_ledger.models import Holding, Portfolio, Transaction
    from holdings_ledger.services.analytics.types import DistributionBucket, HoldingPerformance


@dataclass
class PostedTransaction:
    """A committed ledger entry and its holding after recompute."""

    transaction: Transaction
    holding: Holding


@dataclass(frozen=True)
class TransactionPreview:
    """
    Effect a pending transaction would have on its holding.

    new_value is a full replay with the pending entry included, so a
    back-dated entry followed by a later Update shows no change.
    """

    holding_id: int
    transaction_type: TransactionType
    current_value: Decimal
    amount: Decimal
    new_value: Decimal
    change: Decimal
    change_percentage: Decimal
    is_valid: bool
    message: str | None = None


@dataclass(frozen=True)
class TransactionTotals:
    total_transactions: int
    buy_count: int
    sell_count: int
    update_count: int
    total_bought: Decimal
    total_sold: Decimal
    last_transaction_date: date | None
    last_transaction_type: TransactionType | None


@dataclass(frozen=True)
class CategoryCount:
    category: HoldingCategory
    count: int
    total_value: Decimal


@dataclass(frozen=True)
class HoldingStats:
    total_holdings: int
    active_holdings: int
    sold_holdings: int
    on_hold_holdings: int
    total_invested: Decimal
    total_current_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percentage: Decimal
    by_category: list[CategoryCount] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioSummary:
    """A portfolio with totals over its non-deleted holdings."""

    portfolio: Portfolio
    holding_count: int
    total_invested: Decimal
    current_value: Decimal


@dataclass(frozen=True)
class PortfolioStats:
    portfolio_id: int
    portfolio_name: str
    total_invested: Decimal
    current_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percentage: Decimal
    total_holdings: int
    active_holdings: int
    sold_holdings: int
    on_hold_holdings: int
    best_performer: HoldingPerformance | None
    worst_performer: HoldingPerformance | None
    allocation: list[DistributionBucket] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioDeleteCheck:
    portfolio_id: int
    can_delete: bool
    holding_count: int
