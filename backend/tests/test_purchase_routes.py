"""Purchase screen API tests."""

from datetime import timedelta

from teapot.models import Transaction


class TestCheckRoute:

    def test_new_customer_message(self, client, customer_headers):
        resp = client.post("/api/purchases/check", json={"customer_id": "1234"}, headers=customer_headers)

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "allowed"
        assert data["remaining"] == 5
        assert data["message"] == "New customer! They can purchase up to 5 items."

    def test_denied_customer_shows_countdown(self, client, customer_headers, add_transaction):
        add_transaction(1234, -5, ago=timedelta(hours=1))

        data = client.post(
            "/api/purchases/check", json={"customer_id": "1234"}, headers=customer_headers
        ).get_json()

        assert data["status"] == "denied"
        assert data["remaining"] == 0
        assert data["countdown"].startswith("22:59:") or data["countdown"] == "23:00:00"
        assert len(data["transactions"]) == 1
        assert "message" not in data

    def test_invalid_id(self, client, customer_headers):
        resp = client.post("/api/purchases/check", json={"customer_id": "12"}, headers=customer_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Customer ID must be exactly 4 digits"

    def test_reserved_id(self, client, customer_headers):
        resp = client.post("/api/purchases/check", json={"customer_id": "0001"}, headers=customer_headers)
        assert resp.status_code == 400
        assert "reserved" in resp.get_json()["error"]

    def test_missing_body(self, client, customer_headers):
        resp = client.post("/api/purchases/check", headers=customer_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Please enter a customer ID"


class TestPurchaseRoute:

    def test_successful_purchase(self, client, db_session, customer_headers, seed):
        resp = client.post(
            "/api/purchases", json={"customer_id": "1234", "quantity": 2}, headers=customer_headers
        )

        assert resp.status_code == 201
        data = resp.get_json()
        assert data["message"] == "Successfully purchased 2 items!"
        assert data["eligibility"]["remaining"] == 3

        tx = db_session.query(Transaction).filter_by(customer_id=1234).one()
        assert tx.created_by == seed["customer"].username

    def test_single_item_message(self, client, customer_headers):
        resp = client.post(
            "/api/purchases", json={"customer_id": "1234", "quantity": "1"}, headers=customer_headers
        )
        assert resp.get_json()["message"] == "Successfully purchased 1 item!"

    def test_over_quota_returns_409_with_eligibility(self, client, customer_headers, add_transaction):
        add_transaction(1234, -4, ago=timedelta(hours=2))

        resp = client.post(
            "/api/purchases", json={"customer_id": "1234", "quantity": 2}, headers=customer_headers
        )

        assert resp.status_code == 409
        data = resp.get_json()
        assert data["error"] == "Cannot purchase 2 items. Only 1 remaining."
        assert data["eligibility"]["remaining"] == 1

    def test_denied_customer(self, client, customer_headers, add_transaction):
        add_transaction(1234, -5, ago=timedelta(hours=2))

        resp = client.post(
            "/api/purchases", json={"customer_id": "1234", "quantity": 1}, headers=customer_headers
        )

        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Purchase not allowed yet!"

    def test_bad_quantity(self, client, customer_headers):
        resp = client.post(
            "/api/purchases", json={"customer_id": "1234", "quantity": 1.5}, headers=customer_headers
        )
        assert resp.status_code == 400
