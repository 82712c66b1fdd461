# tests/routers/test_transactions_api.py
"""
Integration tests for the /transactions endpoints.
"""

from datetime import date
from decimal import Decimal

import pytest

from holdings_ledger.models import Transaction, TransactionType
from tests.conftest import add_transaction, create_holding


@pytest.fixture
def holding(db, sample_user):
    return create_holding(db, sample_user, initial_amount="1000", purchase_date=date(2024, 1, 1))


def _payload(holding, transaction_type="Buy", quantity="2", price="250", on="2024-02-01", **extra):
    payload = {
        "holding_id": holding.id,
        "transaction_type": transaction_type,
        "quantity": quantity,
        "price_per_unit": price,
        "transaction_date": on,
    }
    payload.update(extra)
    return payload


class TestPostTransaction:
    """POST /transactions/"""

    def test_buy_returns_entry_and_recomputed_holding(self, client, auth_headers, holding):
        response = client.post("/transactions/", json=_payload(holding), headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["transaction"]["transaction_type"] == "Buy"
        assert Decimal(body["transaction"]["amount"]) == Decimal("500")
        assert Decimal(body["holding"]["current_value"]) == Decimal("1500")
        assert Decimal(body["holding"]["gain_loss"]) == Decimal("500")

    def test_type_is_case_insensitive(self, client, auth_headers, holding):
        response = client.post(
            "/transactions/", json=_payload(holding, "UPDATE", "4", "300"), headers=auth_headers
        )

        assert response.status_code == 201
        assert Decimal(response.json()["holding"]["current_value"]) == Decimal("1200")
        assert Decimal(response.json()["holding"]["quantity"]) == Decimal("4")

    def test_uncovered_sell_is_422_and_changes_nothing(self, client, db, auth_headers, holding):
        response = client.post(
            "/transactions/", json=_payload(holding, "Sell", "1", "1500"), headers=auth_headers
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "InsufficientValueError"
        assert body["details"]["holding_id"] == holding.id
        assert Decimal(body["details"]["current_value"]) == Decimal("1000")
        assert Decimal(body["details"]["amount"]) == Decimal("1500")

        db.refresh(holding)
        assert holding.current_value == Decimal("1000")
        assert db.query(Transaction).count() == 0

    def test_back_dated_update_that_goes_negative_is_422(self, client, db, auth_headers, holding):
        client.post("/transactions/", json=_payload(holding, "Sell", "1", "800", "2024-03-01"), headers=auth_headers)

        response = client.post(
            "/transactions/", json=_payload(holding, "Update", "1", "500", "2024-02-01"), headers=auth_headers
        )

        assert response.status_code == 422
        assert Decimal(response.json()["details"]["resulting_value"]) == Decimal("-300")
        db.refresh(holding)
        assert holding.current_value == Decimal("200")
        assert db.query(Transaction).count() == 1

    def test_future_date_is_400(self, client, auth_headers, holding):
        response = client.post(
            "/transactions/", json=_payload(holding, on="2999-12-31"), headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "FutureDateError"
        assert response.json()["details"] == {"field": "transaction_date"}

    @pytest.mark.parametrize("field,value", [
        ("quantity", "0"),
        ("price_per_unit", "-5"),
        ("transaction_type", "Dividend"),
    ])
    def test_schema_rejections(self, client, auth_headers, holding, field, value):
        payload = _payload(holding)
        payload[field] = value

        response = client.post("/transactions/", json=payload, headers=auth_headers)

        assert response.status_code == 422

    def test_unknown_holding(self, client, auth_headers, holding):
        payload = _payload(holding)
        payload["holding_id"] = 9999

        response = client.post("/transactions/", json=payload, headers=auth_headers)

        assert response.status_code == 404

    def test_foreign_holding(self, client, db, other_user, auth_headers):
        theirs = create_holding(db, other_user)

        response = client.post("/transactions/", json=_payload(theirs), headers=auth_headers)

        assert response.status_code == 403


class TestPreview:
    """POST /transactions/preview"""

    def test_preview_does_not_write(self, client, db, auth_headers, holding):
        response = client.post("/transactions/preview", json=_payload(holding), headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["is_valid"] is True
        assert Decimal(body["new_value"]) == Decimal("1500")
        assert Decimal(body["change_percentage"]) == Decimal("50")
        assert db.query(Transaction).count() == 0

    def test_invalid_preview_is_200_with_message(self, client, auth_headers, holding):
        response = client.post(
            "/transactions/preview", json=_payload(holding, "Sell", "1", "5000"), headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["is_valid"] is False
        assert response.json()["message"]


class TestReadTransactions:
    """GET /transactions/holding/{id} and /transactions/{id}"""

    def test_list_newest_first(self, client, db, auth_headers, holding):
        add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        add_transaction(db, holding, TransactionType.SELL, "5", date(2024, 4, 1))
        add_transaction(db, holding, TransactionType.BUY, "20", date(2024, 3, 1))

        response = client.get(f"/transactions/holding/{holding.id}?limit=2", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert [t["transaction_date"] for t in body["items"]] == ["2024-04-01", "2024-03-01"]
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["has_next"] is True

    def test_get_single(self, client, db, auth_headers, holding):
        txn = add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1), notes="top-up")

        response = client.get(f"/transactions/{txn.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["notes"] == "top-up"

    def test_get_missing(self, client, auth_headers):
        response = client.get("/transactions/424242", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["details"]["resource_type"] == "Transaction"


class TestListAllTransactions:
    """GET /transactions/ and /transactions/recent"""

    def test_spans_holdings_newest_first(self, client, db, sample_user, auth_headers, holding):
        second = create_holding(db, sample_user, name="Bond Ladder")
        add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        add_transaction(db, second, TransactionType.SELL, "5", date(2024, 4, 1))
        add_transaction(db, holding, TransactionType.UPDATE, "900", date(2024, 3, 1))

        response = client.get("/transactions/", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert [t["transaction_date"] for t in body["items"]] == ["2024-04-01", "2024-03-01", "2024-02-01"]
        assert body["pagination"]["total"] == 3

    def test_filters(self, client, db, sample_user, auth_headers, holding):
        second = create_holding(db, sample_user, name="Bond Ladder")
        add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        add_transaction(db, holding, TransactionType.BUY, "20", date(2024, 5, 1))
        add_transaction(db, second, TransactionType.BUY, "30", date(2024, 3, 1))
        add_transaction(db, second, TransactionType.SELL, "5", date(2024, 3, 2))

        by_type = client.get("/transactions/?transaction_type=buy", headers=auth_headers).json()
        by_holding = client.get(f"/transactions/?holding_id={second.id}", headers=auth_headers).json()
        by_range = client.get(
            "/transactions/?start_date=2024-02-15&end_date=2024-04-30", headers=auth_headers
        ).json()
        by_name = client.get("/transactions/?search=bond&sort_by=amount&descending=false", headers=auth_headers).json()

        assert by_type["pagination"]["total"] == 3
        assert {t["holding_id"] for t in by_holding["items"]} == {second.id}
        assert [t["transaction_date"] for t in by_range["items"]] == ["2024-03-02", "2024-03-01"]
        assert [Decimal(t["amount"]) for t in by_name["items"]] == [Decimal("5"), Decimal("30")]

    def test_pagination(self, client, db, auth_headers, holding):
        for day in range(1, 6):
            add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, day))

        body = client.get("/transactions/?skip=1&limit=2", headers=auth_headers).json()

        assert [t["transaction_date"] for t in body["items"]] == ["2024-02-04", "2024-02-03"]
        assert body["pagination"]["total"] == 5
        assert body["pagination"]["has_next"] is True

    def test_other_users_entries_excluded(self, client, db, other_user, auth_headers, holding):
        theirs = create_holding(db, other_user)
        add_transaction(db, theirs, TransactionType.BUY, "10", date(2024, 2, 1))

        body = client.get("/transactions/", headers=auth_headers).json()

        assert body["items"] == []
        assert body["pagination"]["total"] == 0

    def test_inverted_date_range_is_400(self, client, auth_headers):
        response = client.get("/transactions/?start_date=2024-05-01&end_date=2024-01-01", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "start_date"

    def test_unknown_type_is_422(self, client, auth_headers):
        response = client.get("/transactions/?transaction_type=transfer", headers=auth_headers)

        assert response.status_code == 422

    def test_recent(self, client, db, auth_headers, holding):
        add_transaction(db, holding, TransactionType.BUY, "10", date(2024, 2, 1))
        second = add_transaction(db, holding, TransactionType.BUY, "20", date(2024, 1, 15))

        response = client.get("/transactions/recent?count=1", headers=auth_headers)

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [second.id]
