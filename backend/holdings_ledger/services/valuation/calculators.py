# backend/holdings_ledger/services/valuation/calculators.py
"""
Point-in-time valuation by ledger replay.

A holding's value at a date is reconstructed from its initial amount and
the transactions dated on or before that date:

    value = initial_amount
    for txn in sorted(ledger, key=(transaction_date, id)):
        BUY:    value += amount
        SELL:   value -= amount
        UPDATE: value  = amount

Holdings purchased after the cutoff contribute nothing. Replay does not
clamp: a Sell that was valid when posted is always subtracted as-is.

Design Principles:
- Stateless (no instance state, pure functions)
- Inputs are never mutated; callers may pass ORM rows or plain records
- Uses Decimal for ALL financial calculations

Usage:
    calc = ValuationCalculator()
    result = calc.value_at(holding, transactions, date(2024, 6, 30))
    result.value, result.principal
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from holdings_ledger.models import TransactionType
from holdings_ledger.services.constants import ZERO
from holdings_ledger.services.protocols import HoldingRecord, TransactionRecord
from holdings_ledger.services.valuation.types import HoldingValuation, PortfolioSnapshot

logger = logging.getLogger(__name__)


def ledger_order(transaction: TransactionRecord) -> tuple[date, int]:
    """Sort key for replay: transaction date, then id for same-day entries."""
    return transaction.transaction_date, transaction.id


def apply_transaction(value: Decimal, transaction: TransactionRecord) -> Decimal:
    """Return the value after applying one ledger entry."""
    if transaction.transaction_type == TransactionType.BUY:
        return value + transaction.amount
    if transaction.transaction_type == TransactionType.SELL:
        return value - transaction.amount
    if transaction.transaction_type == TransactionType.UPDATE:
        return transaction.amount
    raise ValueError(f"Unknown transaction type: {transaction.transaction_type!r}")


def group_by_holding(
        transactions: Iterable[TransactionRecord],
) -> dict[int, list[TransactionRecord]]:
    """Bucket a flat ledger by holding_id (order inside a bucket is kept)."""
    grouped: dict[int, list[TransactionRecord]] = defaultdict(list)
    for txn in transactions:
        grouped[txn.holding_id].append(txn)
    return grouped


class ValuationCalculator:
    """
    Replays ledgers to value holdings and portfolios at arbitrary dates.

    Every method is a pure function of its arguments. Calling value_at
    twice with the same inputs yields equal results.
    """

    def value_at(
            self,
            holding: HoldingRecord,
            transactions: Sequence[TransactionRecord],
            as_of: date,
    ) -> HoldingValuation:
        """
        Value and principal of one holding at the end of `as_of`.

        Args:
            holding: The holding (only initial_amount and purchase_date are read)
            transactions: Its ledger in any order; entries for other holdings
                          must not be included
            as_of: Cutoff date (inclusive)

        Returns:
            HoldingValuation(0, 0) before the purchase date, otherwise the
            replayed value and the holding's initial amount.
        """
        if holding.purchase_date > as_of:
            return HoldingValuation(value=ZERO, principal=ZERO)

        qualifying = sorted(
            (t for t in transactions if t.transaction_date <= as_of),
            key=ledger_order,
        )

        value = holding.initial_amount
        for txn in qualifying:
            value = apply_transaction(value, txn)

        return HoldingValuation(value=value, principal=holding.initial_amount)

    def portfolio_value_at(
            self,
            holdings: Sequence[HoldingRecord],
            transactions_by_holding: dict[int, list[TransactionRecord]],
            as_of: date,
    ) -> PortfolioSnapshot:
        """
        Sum of value_at over holdings.

        Args:
            holdings: Holdings to include
            transactions_by_holding: Output of group_by_holding()
            as_of: Cutoff date (inclusive)
        """
        total_value = ZERO
        total_principal = ZERO

        for holding in holdings:
            valuation = self.value_at(
                holding,
                transactions_by_holding.get(holding.id, []),
                as_of,
            )
            total_value += valuation.value
            total_principal += valuation.principal

        return PortfolioSnapshot(as_of=as_of, value=total_value, principal=total_principal)

    def invested_principal_at(
            self,
            holdings: Iterable[HoldingRecord],
            as_of: date,
    ) -> Decimal:
        """Sum of initial_amount over holdings purchased on or before `as_of`."""
        return sum(
            (h.initial_amount for h in holdings if h.purchase_date <= as_of),
            ZERO,
        )
