# backend/holdings_ledger/schemas/errors.py
"""
Pydantic schemas for error responses.

One error shape for every endpoint, produced by the global exception
handlers in main.py.
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """
    Standard error response format.

    Example:
        {
            "error": "InsufficientValueError",
            "message": "Sell amount 1500 exceeds current value 1200 of holding 4",
            "details": {"holding_id": 4}
        }
    """

    error: str = Field(
        ...,
        description="Error type (exception class name)"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Additional error context (optional)"
    )


class ValidationErrorDetail(BaseModel):
    """Request validation failure (422) with pydantic's error list."""

    error: str = Field(default="RequestValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict] = Field(
        ...,
        description="List of validation errors"
    )
