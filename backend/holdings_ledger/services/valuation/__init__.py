# backend/holdings_ledger/services/valuation/__init__.py
"""
Valuation Package.

Reconstructs holding and portfolio values at arbitrary dates from the
append-only ledger:
- Single holding at a date (ValuationCalculator.value_at)
- Many holdings at a date (ValuationCalculator.portfolio_value_at)
- Month / year trend series (PeriodCalculator.period_series)

Usage:
    from holdings_ledger.services.valuation import PeriodCalculator, PeriodGranularity

    series = PeriodCalculator().period_series(
        holdings, transactions, PeriodGranularity.MONTH, 12, as_of=date(2024, 6, 30)
    )

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── calculators.py           # Point-in-time replay
    └── history_calculator.py    # Period series

Data Flow:
    Holding + Ledger → ValuationCalculator → HoldingValuation
    Holdings + Ledger → ValuationCalculator → PortfolioSnapshot
    PortfolioSnapshot at each boundary → PeriodCalculator → PeriodSeries
"""

from holdings_ledger.services.valuation.calculators import (
    ValuationCalculator,
    apply_transaction,
    group_by_holding,
    ledger_order,
)
from holdings_ledger.services.valuation.history_calculator import PeriodCalculator, growth_percentage
from holdings_ledger.services.valuation.types import (
    HoldingValuation,
    PeriodComparison,
    PeriodGranularity,
    PeriodSeries,
    PeriodSummary,
    PortfolioSnapshot,
)

__all__ = [
    "ValuationCalculator",
    "PeriodCalculator",
    "apply_transaction",
    "group_by_holding",
    "ledger_order",
    "growth_percentage",
    "HoldingValuation",
    "PortfolioSnapshot",
    "PeriodGranularity",
    "PeriodSummary",
    "PeriodSeries",
    "PeriodComparison",
]
