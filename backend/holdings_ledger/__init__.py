# backend/holdings_ledger/__init__.py
"""Holdings Ledger: holding valuation, dashboard and reporting API."""
