# tests/services/ledger/test_transaction_service.py
"""
Tests for TransactionService.

Covers atomic posting (validate, append, recompute, commit), previews and
ledger reads against an in-memory SQLite database.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from holdings_ledger.models import Transaction, TransactionType
from holdings_ledger.schemas.transactions import TransactionFilterParams
from holdings_ledger.services.exceptions import (
    FutureDateError,
    HoldingNotFoundError,
    InsufficientValueError,
    InvalidDateRangeError,
    InvalidUpdateError,
    PermissionDeniedError,
    TransactionNotFoundError,
)
from holdings_ledger.services.ledger import SqlLedgerStore, TransactionService
from holdings_ledger.services.valuation import ValuationCalculator
from tests.conftest import add_transaction, create_holding

TODAY = date(2024, 6, 1)


class RecordingSink:
    """Activity sink that remembers what it was given."""

    def __init__(self):
        self.records = []

    def record(self, user_id, action, entity, entity_id, details):
        self.records.append((user_id, action, entity, entity_id, details))


class BrokenSink:
    def record(self, user_id, action, entity, entity_id, details):
        raise RuntimeError("audit store unavailable")


@pytest.fixture
def store() -> SqlLedgerStore:
    return SqlLedgerStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def service(store, sink) -> TransactionService:
    return TransactionService(store, ValuationCalculator(), activity=sink)


@pytest.fixture
def holding(db, sample_user):
    return create_holding(db, sample_user, initial_amount="1000", purchase_date=date(2024, 1, 1))


def _post(service, db, user, holding, transaction_type, quantity, price, on, **kwargs):
    return service.create_transaction(
        db,
        user_id=user.id,
        holding_id=holding.id,
        transaction_type=transaction_type,
        quantity=Decimal(quantity),
        price_per_unit=Decimal(price),
        transaction_date=on,
        today=TODAY,
        **kwargs,
    )


def _ledger_count(db, holding) -> int:
    return db.scalar(select(func.count(Transaction.id)).where(Transaction.holding_id == holding.id))


# =============================================================================
# POSTING
# =============================================================================

class TestCreateTransaction:
    """Tests for posting ledger entries."""

    def test_buy_adds_amount(self, service, db, sample_user, holding):
        posted = _post(service, db, sample_user, holding, TransactionType.BUY, "2", "250", date(2024, 2, 1))

        assert posted.transaction.amount == Decimal("500")
        assert posted.holding.current_value == Decimal("1500")

    def test_sell_subtracts_amount(self, service, db, sample_user, holding):
        posted = _post(service, db, sample_user, holding, TransactionType.SELL, "1", "400", date(2024, 2, 1))

        assert posted.holding.current_value == Decimal("600")

    def test_sell_of_entire_value_is_allowed(self, service, db, sample_user, holding):
        posted = _post(service, db, sample_user, holding, TransactionType.SELL, "1", "1000", date(2024, 2, 1))

        assert posted.holding.current_value == Decimal("0")

    def test_amount_is_quantity_times_price(self, service, db, sample_user, holding):
        posted = _post(service, db, sample_user, holding, TransactionType.BUY, "0.5", "123.45", date(2024, 2, 1))

        assert posted.transaction.amount == Decimal("61.725")

    def test_update_sets_value_and_unit_fields(self, service, db, sample_user, holding):
        posted = _post(service, db, sample_user, holding, TransactionType.UPDATE, "10", "180", date(2024, 3, 1))

        assert posted.holding.current_value == Decimal("1800")
        assert posted.holding.quantity == Decimal("10")
        assert posted.holding.average_price_per_unit == Decimal("180")

    def test_back_dated_entry_replays_in_order(self, service, db, sample_user, holding):
        """A Buy dated before an existing Update is absorbed by that Update."""
        _post(service, db, sample_user, holding, TransactionType.UPDATE, "1", "2000", date(2024, 3, 1))

        posted = _post(service, db, sample_user, holding, TransactionType.BUY, "1", "100", date(2024, 2, 1))

        assert posted.holding.current_value == Decimal("2000")

    def test_back_dated_update_keeps_unit_fields_of_latest_update(self, service, db, sample_user, holding):
        _post(service, db, sample_user, holding, TransactionType.UPDATE, "10", "180", date(2024, 3, 1))

        posted = _post(service, db, sample_user, holding, TransactionType.UPDATE, "4", "150", date(2024, 2, 1))

        assert posted.holding.current_value == Decimal("1800")
        assert posted.holding.quantity == Decimal("10")
        assert posted.holding.average_price_per_unit == Decimal("180")

    def test_cached_value_equals_replay(self, service, store, db, sample_user, holding):
        _post(service, db, sample_user, holding, TransactionType.BUY, "1", "500", date(2024, 1, 10))
        _post(service, db, sample_user, holding, TransactionType.UPDATE, "1", "1800", date(2024, 2, 1))
        _post(service, db, sample_user, holding, TransactionType.SELL, "1", "300", date(2024, 1, 20))
        posted = _post(service, db, sample_user, holding, TransactionType.BUY, "1", "50", date(2024, 3, 1))

        ledger = store.get_transactions_for_holding(db, holding.id)
        replayed = ValuationCalculator().value_at(posted.holding, ledger, TODAY).value

        assert posted.holding.current_value == replayed == Decimal("1850")

    def test_records_activity(self, service, sink, db, sample_user, holding):
        posted = _post(service, db, sample_user, holding, TransactionType.BUY, "1", "10", date(2024, 2, 1))

        user_id, action, entity, entity_id, details = sink.records[-1]
        assert (user_id, action, entity, entity_id) == (sample_user.id, "create", "Transaction", posted.transaction.id)
        assert details["transaction_type"] == "Buy"

    def test_broken_activity_sink_does_not_fail_post(self, store, db, sample_user, holding):
        service = TransactionService(store, activity=BrokenSink())

        posted = _post(service, db, sample_user, holding, TransactionType.BUY, "1", "10", date(2024, 2, 1))

        assert posted.holding.current_value == Decimal("1010")
        assert _ledger_count(db, holding) == 1


class TestCreateTransactionRejections:
    """Rejected posts write nothing."""

    def test_sell_above_value_rejected(self, service, db, sample_user, holding):
        with pytest.raises(InsufficientValueError) as exc_info:
            _post(service, db, sample_user, holding, TransactionType.SELL, "1", "1000.01", date(2024, 2, 1))

        assert exc_info.value.holding_id == holding.id
        assert exc_info.value.current_value == Decimal("1000")
        assert exc_info.value.amount == Decimal("1000.01")

        db.refresh(holding)
        assert holding.current_value == Decimal("1000")
        assert _ledger_count(db, holding) == 0

    def test_sell_checked_against_current_value(self, service, db, sample_user, holding):
        """The cover check uses today's value, not the value on the entry date."""
        _post(service, db, sample_user, holding, TransactionType.UPDATE, "1", "200", date(2024, 3, 1))

        with pytest.raises(InsufficientValueError):
            _post(service, db, sample_user, holding, TransactionType.SELL, "1", "500", date(2024, 2, 1))

    def test_back_dated_update_before_sell_cannot_go_negative(self, service, db, sample_user, holding):
        """An Update slotted before an existing Sell must not leave a negative value."""
        _post(service, db, sample_user, holding, TransactionType.SELL, "1", "800", date(2024, 3, 1))

        with pytest.raises(InsufficientValueError) as exc_info:
            _post(service, db, sample_user, holding, TransactionType.UPDATE, "1", "500", date(2024, 2, 1))

        assert exc_info.value.current_value == Decimal("200")
        assert exc_info.value.amount == Decimal("500")
        assert exc_info.value.resulting_value == Decimal("-300")

        db.refresh(holding)
        assert holding.current_value == Decimal("200")
        assert holding.quantity is None
        assert _ledger_count(db, holding) == 1

    def test_future_date_rejected(self, service, db, sample_user, holding):
        with pytest.raises(FutureDateError) as exc_info:
            _post(service, db, sample_user, holding, TransactionType.BUY, "1", "10", date(2024, 6, 2))

        assert exc_info.value.field == "transaction_date"
        assert _ledger_count(db, holding) == 0

    def test_entry_dated_today_accepted(self, service, db, sample_user, holding):
        posted = _post(service, db, sample_user, holding, TransactionType.BUY, "1", "10", TODAY)

        assert posted.transaction.transaction_date == TODAY

    @pytest.mark.parametrize("quantity,price,field", [
        ("0", "100", "quantity"),
        ("5", "0", "price_per_unit"),
    ])
    def test_update_requires_positive_fields(self, service, db, sample_user, holding, quantity, price, field):
        with pytest.raises(InvalidUpdateError) as exc_info:
            _post(service, db, sample_user, holding, TransactionType.UPDATE, quantity, price, date(2024, 2, 1))

        assert exc_info.value.field == field

    def test_missing_holding(self, service, db, sample_user):
        with pytest.raises(HoldingNotFoundError):
            service.create_transaction(
                db, sample_user.id, 999, TransactionType.BUY,
                Decimal("1"), Decimal("1"), date(2024, 2, 1), today=TODAY,
            )

    def test_soft_deleted_holding(self, service, db, sample_user, holding):
        holding.is_deleted = True
        db.commit()

        with pytest.raises(HoldingNotFoundError):
            _post(service, db, sample_user, holding, TransactionType.BUY, "1", "10", date(2024, 2, 1))

    def test_other_users_holding(self, service, db, other_user, holding):
        with pytest.raises(PermissionDeniedError):
            _post(service, db, other_user, holding, TransactionType.BUY, "1", "10", date(2024, 2, 1))

        assert _ledger_count(db, holding) == 0

    def test_no_activity_on_rejection(self, service, sink, db, sample_user, holding):
        with pytest.raises(InsufficientValueError):
            _post(service, db, sample_user, holding, TransactionType.SELL, "1", "5000", date(2024, 2, 1))

        assert sink.records == []


# =============================================================================
# PREVIEW
# =============================================================================

class TestPreviewTransaction:
    """Previews replay without writing."""

    def _preview(self, service, db, user, holding, transaction_type, quantity, price, on):
        return service.preview_transaction(
            db, user.id, holding.id, transaction_type,
            Decimal(quantity), Decimal(price), on, today=TODAY,
        )

    def test_buy_preview(self, service, db, sample_user, holding):
        preview = self._preview(service, db, sample_user, holding, TransactionType.BUY, "1", "250", date(2024, 2, 1))

        assert preview.is_valid
        assert preview.current_value == Decimal("1000")
        assert preview.new_value == Decimal("1250")
        assert preview.change == Decimal("250")
        assert preview.change_percentage == Decimal("25")
        assert _ledger_count(db, holding) == 0

    def test_uncovered_sell_is_invalid(self, service, db, sample_user, holding):
        preview = self._preview(service, db, sample_user, holding, TransactionType.SELL, "1", "1500", date(2024, 2, 1))

        assert not preview.is_valid
        assert "exceeds" in preview.message
        assert preview.new_value == preview.current_value
        assert preview.change == Decimal("0")

    def test_future_date_is_invalid(self, service, db, sample_user, holding):
        preview = self._preview(service, db, sample_user, holding, TransactionType.BUY, "1", "1", date(2025, 1, 1))

        assert not preview.is_valid
        assert "future" in preview.message

    def test_back_dated_preview_absorbed_by_update(self, service, db, sample_user, holding):
        add_transaction(db, holding, TransactionType.UPDATE, "1500", date(2024, 3, 1))

        preview = self._preview(service, db, sample_user, holding, TransactionType.BUY, "1", "100", date(2024, 2, 1))

        assert preview.current_value == Decimal("1500")
        assert preview.new_value == Decimal("1500")

    def test_back_dated_update_before_sell_is_invalid(self, service, db, sample_user, holding):
        add_transaction(db, holding, TransactionType.SELL, "800", date(2024, 3, 1))

        preview = self._preview(service, db, sample_user, holding, TransactionType.UPDATE, "1", "500", date(2024, 2, 1))

        assert not preview.is_valid
        assert "below zero" in preview.message
        assert preview.current_value == Decimal("200")
        assert preview.new_value == Decimal("200")

    def test_pending_entry_sorts_after_same_day_entries(self, service, db, sample_user, holding):
        add_transaction(db, holding, TransactionType.UPDATE, "1500", date(2024, 3, 1))

        preview = self._preview(service, db, sample_user, holding, TransactionType.BUY, "1", "100", date(2024, 3, 1))

        assert preview.new_value == Decimal("1600")

    def test_foreign_holding_raises(self, service, db, other_user, holding):
        with pytest.raises(PermissionDeniedError):
            self._preview(service, db, other_user, holding, TransactionType.BUY, "1", "1", date(2024, 2, 1))


# =============================================================================
# READS
# =============================================================================

class TestReads:
    """Tests for listing and fetching ledger entries."""

    def test_list_newest_first(self, service, db, sample_user, holding):
        first = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        second = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 3, 1))
        third = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 3, 1))

        items, total = service.list_for_holding(db, sample_user.id, holding.id)

        assert total == 3
        assert [t.id for t in items] == [third.id, second.id, first.id]

    def test_list_pagination(self, service, db, sample_user, holding):
        for day in range(1, 6):
            add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, day))

        items, total = service.list_for_holding(db, sample_user.id, holding.id, skip=2, limit=2)

        assert total == 5
        assert [t.transaction_date.day for t in items] == [3, 2]

    def test_get_transaction(self, service, db, sample_user, holding):
        txn = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))

        assert service.get_transaction(db, txn.id, sample_user.id).id == txn.id

    def test_get_missing_transaction(self, service, db, sample_user):
        with pytest.raises(TransactionNotFoundError):
            service.get_transaction(db, 404, sample_user.id)

    def test_get_foreign_transaction(self, service, db, other_user, holding):
        txn = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))

        with pytest.raises(PermissionDeniedError):
            service.get_transaction(db, txn.id, other_user.id)

    def test_transaction_of_deleted_holding_is_not_found(self, service, db, sample_user, holding):
        txn = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        holding.is_deleted = True
        db.commit()

        with pytest.raises(TransactionNotFoundError):
            service.get_transaction(db, txn.id, sample_user.id)


class TestListForOwner:
    """User-wide ledger listing with filters."""

    def test_excludes_deleted_holdings(self, service, db, sample_user, holding):
        gone = create_holding(db, sample_user, name="Closed")
        add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        add_transaction(db, gone, TransactionType.BUY, "10", date(2024, 2, 2))
        gone.is_deleted = True
        db.commit()

        items, total = service.list_for_owner(db, sample_user.id, TransactionFilterParams())

        assert total == 1
        assert [t.holding_id for t in items] == [holding.id]

    def test_type_and_date_filters(self, service, db, sample_user, holding):
        add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        add_transaction(db, holding, TransactionType.SELL, "5", date(2024, 3, 1))
        keep = add_transaction(db, holding, TransactionType.SELL, "7", date(2024, 4, 1))

        filters = TransactionFilterParams(transaction_type="sell", start_date=date(2024, 3, 15))
        items, total = service.list_for_owner(db, sample_user.id, filters)

        assert total == 1
        assert [t.id for t in items] == [keep.id]

    def test_same_day_ties_follow_id(self, service, db, sample_user, holding):
        first = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        second = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))

        items, _ = service.list_for_owner(db, sample_user.id, TransactionFilterParams(descending=False))

        assert [t.id for t in items] == [first.id, second.id]

    def test_inverted_range_rejected(self, service, db, sample_user):
        filters = TransactionFilterParams(start_date=date(2024, 5, 1), end_date=date(2024, 1, 1))

        with pytest.raises(InvalidDateRangeError):
            service.list_for_owner(db, sample_user.id, filters)
