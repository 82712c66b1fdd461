# backend/holdings_ledger/schemas/portfolios.py
"""
Pydantic schemas for Portfolio endpoints.

Portfolios are named groupings of holdings. The owner always comes from
the bearer token, never from the request body.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from holdings_ledger.schemas.analytics import DistributionItem, PerformanceItem
from holdings_ledger.schemas.validators import validate_optional_text


# =============================================================================
# CREATE / UPDATE SCHEMAS
# =============================================================================

class PortfolioCreate(BaseModel):
    name: str = Field(
        ...,
        min_length=3,
        max_length=100,
        examples=["Retirement", "Tech Stocks"],
        description="Name of the portfolio",
    )
    description: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Normalize name: trim whitespace."""
        stripped = v.strip()
        if len(stripped) < 3:
            raise ValueError("Name must be at least 3 characters")
        return stripped

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return validate_optional_text(v)


class PortfolioUpdate(PortfolioCreate):
    """PUT body: name and description are both replaced."""
    pass


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class PortfolioResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: str | None
    is_default: bool
    created_at: datetime
    updated_at: datetime


class PortfolioSummaryResponse(BaseModel):
    """A portfolio with totals over its holdings."""

    model_config = ConfigDict(from_attributes=True)

    portfolio: PortfolioResponse
    holding_count: int
    total_invested: Decimal
    current_value: Decimal


class PortfolioCanDeleteResponse(BaseModel):
    portfolio_id: int
    can_delete: bool
    holding_count: int
    message: str


class PortfolioStatsResponse(BaseModel):
    """
    Totals, status counts, best/worst holding and category allocation of
    one portfolio.
    """

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
    best_performer: PerformanceItem | None
    worst_performer: PerformanceItem | None
    allocation: list[DistributionItem]
