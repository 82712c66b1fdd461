# backend/holdings_ledger/schemas/validators.py
"""
Reusable validation functions for Pydantic schemas and query parameters.

This module is the ONLY place where wire strings become enum members:
- parse_enum: case-insensitive decode by value ("RealEstate") or name ("REAL_ESTATE")
- enum_validator: the same, packaged as a pydantic BeforeValidator
- validate_optional_text / validate_name: whitespace trimming for free text and names

Everything past the schema layer works on closed enum members.
"""

from enum import Enum
from typing import TypeVar

from pydantic import BeforeValidator

E = TypeVar("E", bound=Enum)


def _normalize(value: str) -> str:
    return value.strip().replace("_", "").replace(" ", "").replace("-", "").lower()


def parse_enum(enum_cls: type[E], value: object) -> E:
    """
    Decode a wire value into a member of `enum_cls`.

    Matching ignores case, spaces, dashes and underscores, so "realestate",
    "Real Estate" and "REAL_ESTATE" all map to HoldingCategory.REAL_ESTATE.

    Args:
        enum_cls: Target enum
        value: Member, member value or member name

    Returns:
        The enum member

    Raises:
        ValueError: If value matches no member
    """
    if isinstance(value, enum_cls):
        return value

    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid {enum_cls.__name__}: {value!r}")

    wanted = _normalize(value)
    for member in enum_cls:
        if _normalize(str(member.value)) == wanted or _normalize(member.name) == wanted:
            return member

    valid = ", ".join(str(m.value) for m in enum_cls)
    raise ValueError(f"Invalid {enum_cls.__name__}: '{value}'. Valid options: {valid}")


def enum_validator(enum_cls: type[E], optional: bool = False) -> BeforeValidator:
    """
    BeforeValidator for an enum-typed field or query parameter.

    Usage:
        category: Annotated[HoldingCategory, enum_validator(HoldingCategory)]
        status: Annotated[HoldingStatus | None, enum_validator(HoldingStatus, optional=True)] = None
    """
    def _validate(value: object) -> E | None:
        if optional and value is None:
            return None
        return parse_enum(enum_cls, value)

    return BeforeValidator(_validate)


def validate_optional_text(value: str | None) -> str | None:
    """Trim free text; blank strings become None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def validate_name(value: str | None) -> str | None:
    """Trim a name; a blank name is rejected. None (field not being changed) passes."""
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        raise ValueError("Name cannot be blank")
    return stripped
