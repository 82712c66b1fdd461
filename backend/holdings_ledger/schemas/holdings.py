# backend/holdings_ledger/schemas/holdings.py
"""
Pydantic schemas for Holding endpoints.

- HoldingCreate: what clients send to open a position
- HoldingUpdate: descriptive fields only; value fields are ledger-driven
- HoldingResponse / HoldingDetailResponse: what the API returns

Enum fields accept any casing of the wire value ("realestate", "RealEstate")
and always serialize back to the canonical value.

IMPORTANT: All financial values use Decimal. Never use float for money!
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from holdings_ledger.models import HoldingCategory, HoldingStatus, TransactionType
from holdings_ledger.schemas.pagination import PaginationMeta
from holdings_ledger.schemas.validators import enum_validator, validate_name, validate_optional_text
from holdings_ledger.services.analytics.returns import calculate_gain_loss, calculate_gain_loss_percentage
from holdings_ledger.services.constants import CURRENCY_QUANTUM, PERCENTAGE_QUANTUM

CategoryField = Annotated[HoldingCategory, enum_validator(HoldingCategory)]
StatusField = Annotated[HoldingStatus, enum_validator(HoldingStatus)]

HoldingSortField = Literal["amount", "currentvalue", "gainloss", "purchasedate", "name"]


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class HoldingCreate(BaseModel):
    """Open a new holding. current_value starts equal to initial_amount."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Vanguard S&P 500"])
    category: CategoryField = Field(..., examples=["Stocks", "RealEstate"])
    status: StatusField = Field(default=HoldingStatus.ACTIVE)

    initial_amount: Decimal = Field(
        ...,
        ge=0,
        max_digits=18,
        decimal_places=4,
        description="Principal invested at purchase (0 or positive)",
        examples=["1000", "2500.50"],
    )
    quantity: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=8)
    average_price_per_unit: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=8)

    purchase_date: date = Field(..., description="Must not be in the future", examples=["2024-03-15"])
    portfolio_id: int | None = Field(default=None, ge=1)
    broker_platform: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return validate_name(v)

    @field_validator("broker_platform", "notes")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return validate_optional_text(v)


class HoldingUpdate(BaseModel):
    """
    Partial update of descriptive fields.

    initial_amount, current_value and purchase_date are not editable: the
    value history is owned by the ledger.
    """

    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: Annotated[HoldingCategory | None, enum_validator(HoldingCategory, optional=True)] = None
    status: Annotated[HoldingStatus | None, enum_validator(HoldingStatus, optional=True)] = None
    portfolio_id: int | None = Field(default=None, ge=1)
    broker_platform: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return validate_name(v)

    @field_validator("broker_platform", "notes")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return validate_optional_text(v)


class HoldingFilterParams(BaseModel):
    """Filters and sorting for GET /holdings."""

    status: Annotated[HoldingStatus | None, enum_validator(HoldingStatus, optional=True)] = None
    category: Annotated[HoldingCategory | None, enum_validator(HoldingCategory, optional=True)] = None
    portfolio_id: int | None = None
    search: str | None = None
    min_value: Decimal | None = None
    max_value: Decimal | None = None
    purchased_from: date | None = None
    purchased_to: date | None = None
    sort_by: HoldingSortField = "purchasedate"
    descending: bool = True


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class HoldingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    portfolio_id: int | None
    name: str
    category: HoldingCategory
    status: HoldingStatus
    initial_amount: Decimal
    current_value: Decimal
    quantity: Decimal | None
    average_price_per_unit: Decimal | None
    purchase_date: date
    broker_platform: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def gain_loss(self) -> Decimal:
        return calculate_gain_loss(self.initial_amount, self.current_value).quantize(CURRENCY_QUANTUM)

    @computed_field
    @property
    def gain_loss_percentage(self) -> Decimal:
        return calculate_gain_loss_percentage(self.initial_amount, self.current_value).quantize(
            PERCENTAGE_QUANTUM
        )


class TransactionTotals(BaseModel):
    """Ledger counts shown on the holding detail view."""

    model_config = ConfigDict(from_attributes=True)

    total_transactions: int
    buy_count: int
    sell_count: int
    update_count: int
    total_bought: Decimal
    total_sold: Decimal
    last_transaction_date: date | None
    last_transaction_type: TransactionType | None


class HoldingDetailResponse(HoldingResponse):
    transactions: TransactionTotals


class HoldingListResponse(BaseModel):
    items: list[HoldingResponse]
    pagination: PaginationMeta


class CategoryCount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: HoldingCategory
    count: int
    total_value: Decimal


class HoldingStatsResponse(BaseModel):
    """Counts and totals across the user's holdings."""

    model_config = ConfigDict(from_attributes=True)

    total_holdings: int
    active_holdings: int
    sold_holdings: int
    on_hold_holdings: int
    total_invested: Decimal
    total_current_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percentage: Decimal
    by_category: list[CategoryCount]
