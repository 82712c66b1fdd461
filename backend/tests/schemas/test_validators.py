# tests/schemas/test_validators.py
"""
Tests for wire-string decoding of the closed vocabularies.
"""

from typing import Annotated

import pytest
from pydantic import BaseModel, ValidationError

from holdings_ledger.models import HoldingCategory, HoldingStatus, TransactionType
from holdings_ledger.schemas.validators import enum_validator, parse_enum, validate_name, validate_optional_text
from holdings_ledger.services.reports.types import DateRangePreset


class TestParseEnum:

    @pytest.mark.parametrize("raw", ["RealEstate", "realestate", "REAL_ESTATE", "Real Estate", "real-estate"])
    def test_category_spellings(self, raw):
        assert parse_enum(HoldingCategory, raw) is HoldingCategory.REAL_ESTATE

    @pytest.mark.parametrize("raw,expected", [
        ("onhold", HoldingStatus.ON_HOLD),
        ("On_Hold", HoldingStatus.ON_HOLD),
        ("sell", TransactionType.SELL),
        ("thisYear", DateRangePreset.THIS_YEAR),
        ("LAST_12_MONTHS", DateRangePreset.LAST_12_MONTHS),
    ])
    def test_other_vocabularies(self, raw, expected):
        assert parse_enum(type(expected), raw) is expected

    def test_member_passes_through(self):
        assert parse_enum(TransactionType, TransactionType.BUY) is TransactionType.BUY

    @pytest.mark.parametrize("raw", ["Dividend", "", "   ", None, 3])
    def test_rejects_unknown(self, raw):
        with pytest.raises(ValueError):
            parse_enum(TransactionType, raw)

    def test_error_lists_valid_options(self):
        with pytest.raises(ValueError, match="Buy, Sell, Update"):
            parse_enum(TransactionType, "Split")


class _Tagged(BaseModel):
    kind: Annotated[TransactionType, enum_validator(TransactionType)]
    status: Annotated[HoldingStatus | None, enum_validator(HoldingStatus, optional=True)] = None


class TestEnumValidator:

    def test_decodes_in_model(self):
        tagged = _Tagged(kind="UPDATE", status="sold")

        assert tagged.kind is TransactionType.UPDATE
        assert tagged.status is HoldingStatus.SOLD

    def test_optional_accepts_none(self):
        assert _Tagged(kind="buy", status=None).status is None

    def test_invalid_becomes_pydantic_error(self):
        with pytest.raises(ValidationError):
            _Tagged(kind="transfer")


class TestValidateOptionalText:

    @pytest.mark.parametrize("raw,expected", [(None, None), ("", None), ("   ", None), (" memo ", "memo")])
    def test_trims(self, raw, expected):
        assert validate_optional_text(raw) == expected


class TestValidateName:

    def test_trims(self):
        assert validate_name("  Growth Fund ") == "Growth Fund"

    def test_none_passes(self):
        assert validate_name(None) is None

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_blank_rejected(self, raw):
        with pytest.raises(ValueError, match="blank"):
            validate_name(raw)
