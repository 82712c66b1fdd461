# backend/holdings_ledger/schemas/transactions.py
"""
Pydantic schemas for ledger Transactions.

Transactions are append-only: there is a Create schema and Response
schemas, but no Update.

Validation layers:
- Field constraints here: positive quantity and price, type decoding
- TransactionService: future dates, Update rules, Sell cover check, ownership

IMPORTANT: All financial values use Decimal for precision.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from holdings_ledger.models import TransactionType
from holdings_ledger.schemas.holdings import HoldingResponse
from holdings_ledger.schemas.pagination import PaginationMeta
from holdings_ledger.schemas.validators import enum_validator, validate_optional_text

TransactionTypeField = Annotated[TransactionType, enum_validator(TransactionType)]
TransactionSortField = Literal["date", "amount"]


class TransactionCreate(BaseModel):
    """
    Post a ledger entry against a holding.

    amount is derived as quantity * price_per_unit. For an Update that
    product is the holding's new absolute value.
    """

    holding_id: int = Field(..., ge=1)
    transaction_type: TransactionTypeField = Field(..., examples=["Buy", "Sell", "Update"])
    quantity: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Units traded (must be positive)",
        examples=["10", "0.5"],
    )
    price_per_unit: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Price per unit (must be positive)",
        examples=["150.50"],
    )
    transaction_date: date = Field(..., description="Must not be in the future", examples=["2024-06-15"])
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str | None) -> str | None:
        return validate_optional_text(v)


class TransactionFilterParams(BaseModel):
    """Filters and sorting for GET /transactions across all of a user's holdings."""

    holding_id: int | None = None
    transaction_type: Annotated[
        TransactionType | None, enum_validator(TransactionType, optional=True)
    ] = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = Field(default=None, description="Substring of the holding name")
    sort_by: TransactionSortField = "date"
    descending: bool = True


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    holding_id: int
    transaction_type: TransactionType
    quantity: Decimal
    price_per_unit: Decimal
    amount: Decimal
    transaction_date: date
    notes: str | None
    created_at: datetime


class TransactionCreatedResponse(BaseModel):
    """The new ledger entry and the holding with its recomputed value."""

    transaction: TransactionResponse
    holding: HoldingResponse


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    pagination: PaginationMeta


class TransactionPreviewResponse(BaseModel):
    """Effect a transaction would have, without writing anything."""

    model_config = ConfigDict(from_attributes=True)

    holding_id: int
    transaction_type: TransactionType
    current_value: Decimal
    amount: Decimal
    new_value: Decimal
    change: Decimal
    change_percentage: Decimal
    is_valid: bool
    message: str | None
