"""
Tests for the booking, invoice, bill and intercompany endpoints.
"""

import pytest

CHART = [
    ("1000", "ASSET"),
    ("1100", "ASSET"),
    ("1200", "ASSET"),
    ("1500", "ASSET"),
    ("2000", "LIABILITY"),
    ("2100", "LIABILITY"),
    ("2200", "LIABILITY"),
    ("2500", "LIABILITY"),
    ("4000", "REVENUE"),
    ("4100", "REVENUE"),
    ("5000", "EXPENSE"),
    ("6000", "EXPENSE"),
]


def setup_entity(client, name="Parent Pty Ltd"):
    entity_id = client.post("/entities", json={"name": name}).json()["id"]
    ids = {}
    for code, account_type in CHART:
        ids[code] = client.post(f"/entities/{entity_id}/accounts", json={
            "code": code,
            "name": f"Account {code}",
            "account_type": account_type,
        }).json()["id"]
    return entity_id, ids


def booking_accounts(ids):
    return {
        "bank_account_id": ids["1000"],
        "customer_deposits_held_account_id": ids["2000"],
        "accounts_receivable_account_id": ids["1100"],
        "margin_revenue_account_id": ids["4100"],
        "supplier_payouts_account_id": ids["5000"],
        "gst_on_income_account_id": ids["2100"],
    }


def balance_of(client, entity_id, account_id):
    response = client.get(f"/entities/{entity_id}/accounts/{account_id}/balance")
    return response.json()["balance"]


@pytest.fixture
def booking(client):
    entity_id, ids = setup_entity(client)
    response = client.post("/bookings", json={
        "entity_id": entity_id,
        "external_booking_id": "BK-1001",
        "customer_name": "Jane Citizen",
        "supplier_name": "Big Lift Cranes",
        "total_job_amount": "5500.00",
        "margin_amount": "550.00",
    })
    assert response.status_code == 201
    return entity_id, ids, response.json()


class TestBookingEndpoints:

    def test_create_booking_is_pending(self, booking):
        _, _, created = booking

        assert created["status"] == "PENDING"
        assert created["supplier_id"] is not None
        assert created["events"] == []

    def test_duplicate_booking_returns_400(self, client, booking):
        entity_id, _, _ = booking

        response = client.post("/bookings", json={
            "entity_id": entity_id,
            "external_booking_id": "BK-1001",
            "customer_name": "Someone Else",
            "total_job_amount": "100",
        })

        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    def test_deposit_confirms_booking_and_splits_gst(self, client, booking):
        entity_id, ids, created = booking

        response = client.post(f"/bookings/{created['id']}/deposit", json={
            "amount": "1100.00",
            "date": "2025-03-01",
            "accounts": booking_accounts(ids),
        })

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "CONFIRMED"
        assert data["deposit_amount"] == "1100.0000"
        assert [e["event_type"] for e in data["events"]] == ["DEPOSIT"]
        assert balance_of(client, entity_id, ids["1000"]) == "1100.0000"
        assert balance_of(client, entity_id, ids["2000"]) == "1000.0000"
        assert balance_of(client, entity_id, ids["2100"]) == "100.0000"

    def test_non_positive_deposit_returns_400(self, client, booking):
        _, ids, created = booking

        response = client.post(f"/bookings/{created['id']}/deposit", json={
            "amount": "0",
            "date": "2025-03-01",
            "accounts": booking_accounts(ids),
        })

        assert response.status_code == 400

    def test_cancel_with_refund(self, client, booking):
        entity_id, ids, created = booking
        client.post(f"/bookings/{created['id']}/deposit", json={
            "amount": "1100.00",
            "date": "2025-03-01",
            "accounts": booking_accounts(ids),
        })

        response = client.post(f"/bookings/{created['id']}/cancel", json={
            "date": "2025-03-05",
            "accounts": booking_accounts(ids),
            "scenario": "DEPOSIT_REFUNDED",
        })

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert balance_of(client, entity_id, ids["1000"]) == "0.0000"

    def test_unknown_booking_returns_404(self, client):
        assert client.get("/bookings/9999").status_code == 404


class TestInvoiceEndpoints:

    def create_invoice(self, client, entity_id, **overrides):
        contact_id = client.post(f"/entities/{entity_id}/contacts", json={
            "contact_type": "CUSTOMER",
            "name": "Acme Builders",
        }).json()["id"]
        body = {
            "contact_id": contact_id,
            "number": "INV-0001",
            "issue_date": "2025-04-01",
            "due_date": "2025-04-30",
            "subtotal_amount": "1000.00",
            "tax_amount": "100.00",
        }
        body.update(overrides)
        return client.post(f"/entities/{entity_id}/invoices", json=body)

    def test_create_post_and_pay_invoice(self, client):
        entity_id, ids = setup_entity(client)
        invoice = self.create_invoice(client, entity_id).json()
        assert invoice["status"] == "DRAFT"
        assert invoice["total_amount"] == "1100.0000"

        posted = client.post(
            f"/entities/{entity_id}/invoices/{invoice['id']}/post",
            json={
                "receivable_account_id": ids["1100"],
                "revenue_account_id": ids["4000"],
                "tax_liability_account_id": ids["2100"],
            },
        )
        assert posted.status_code == 200
        assert posted.json()["status"] == "SENT"
        assert balance_of(client, entity_id, ids["1100"]) == "1100.0000"

        payment = client.post(
            f"/entities/{entity_id}/invoices/{invoice['id']}/payments",
            json={
                "amount": "1100.00",
                "payment_date": "2025-04-15",
                "bank_account_id": ids["1000"],
                "receivable_account_id": ids["1100"],
            },
        )
        assert payment.status_code == 201
        assert payment.json()["direction"] == "INCOMING"

        fetched = client.get(f"/entities/{entity_id}/invoices/{invoice['id']}")
        assert fetched.json()["status"] == "PAID"
        assert balance_of(client, entity_id, ids["1100"]) == "0.0000"

    def test_due_before_issue_returns_400(self, client):
        entity_id, _ = setup_entity(client)

        response = self.create_invoice(client, entity_id, due_date="2025-03-01")

        assert response.status_code == 400

    def test_invoice_of_other_entity_returns_404(self, client):
        entity_id, _ = setup_entity(client)
        other_id, _ = setup_entity(client, "Other")
        invoice = self.create_invoice(client, entity_id).json()

        response = client.get(f"/entities/{other_id}/invoices/{invoice['id']}")

        assert response.status_code == 404


class TestBillEndpoints:

    def create_bill(self, client, entity_id, contact_type="SUPPLIER", **overrides):
        contact_id = client.post(f"/entities/{entity_id}/contacts", json={
            "contact_type": contact_type,
            "name": "Big Lift Cranes",
        }).json()["id"]
        body = {
            "contact_id": contact_id,
            "number": "BILL-0001",
            "issue_date": "2025-05-01",
            "due_date": "2025-05-31",
            "subtotal_amount": "2000.00",
            "tax_amount": "200.00",
        }
        body.update(overrides)
        return client.post(f"/entities/{entity_id}/bills", json=body)

    def test_create_post_and_pay_bill(self, client):
        entity_id, ids = setup_entity(client)
        bill = self.create_bill(client, entity_id)
        assert bill.status_code == 201
        bill = bill.json()
        assert bill["status"] == "DRAFT"
        assert bill["total_amount"] == "2200.0000"

        posted = client.post(
            f"/entities/{entity_id}/bills/{bill['id']}/post",
            json={
                "payable_account_id": ids["2200"],
                "expense_account_id": ids["6000"],
                "tax_asset_account_id": ids["1200"],
            },
        )
        assert posted.status_code == 200
        assert posted.json()["status"] == "SENT"
        assert balance_of(client, entity_id, ids["2200"]) == "2200.0000"
        assert balance_of(client, entity_id, ids["1200"]) == "200.0000"

        payment = client.post(
            f"/entities/{entity_id}/bills/{bill['id']}/payments",
            json={
                "amount": "2200.00",
                "payment_date": "2025-05-20",
                "bank_account_id": ids["1000"],
                "payable_account_id": ids["2200"],
            },
        )
        assert payment.status_code == 201
        assert payment.json()["direction"] == "OUTGOING"

        fetched = client.get(f"/entities/{entity_id}/bills/{bill['id']}")
        assert fetched.json()["status"] == "PAID"
        assert balance_of(client, entity_id, ids["2200"]) == "0.0000"
        assert balance_of(client, entity_id, ids["1000"]) == "-2200.0000"

    def test_customer_contact_returns_400(self, client):
        entity_id, _ = setup_entity(client)

        response = self.create_bill(client, entity_id, contact_type="CUSTOMER")

        assert response.status_code == 400

    def test_bill_of_other_entity_returns_404(self, client):
        entity_id, _ = setup_entity(client)
        other_id, _ = setup_entity(client, "Other")
        bill = self.create_bill(client, entity_id).json()

        response = client.get(f"/entities/{other_id}/bills/{bill['id']}")

        assert response.status_code == 404


class TestIntercompanyEndpoints:

    def loan_body(self, parent_id, parent_ids, sub_id, sub_ids, **overrides):
        body = {
            "from_entity_id": parent_id,
            "to_entity_id": sub_id,
            "amount": "25000",
            "date": "2025-05-01",
            "description": "Working capital",
            "from_loan_account_id": parent_ids["1500"],
            "to_loan_account_id": sub_ids["2500"],
            "from_bank_account_id": parent_ids["1000"],
            "to_bank_account_id": sub_ids["1000"],
        }
        body.update(overrides)
        return body

    def test_loan_transfer_returns_201(self, client):
        parent_id, parent_ids = setup_entity(client, "Parent")
        sub_id, sub_ids = setup_entity(client, "Subsidiary")

        response = client.post(
            "/intercompany/loans",
            json=self.loan_body(parent_id, parent_ids, sub_id, sub_ids),
        )

        assert response.status_code == 201
        assert response.json()["amount"] == "25000.0000"
        assert balance_of(client, sub_id, sub_ids["2500"]) == "25000.0000"

    def test_half_posted_transfer_returns_409(self, client):
        parent_id, parent_ids = setup_entity(client, "Parent")
        sub_id, sub_ids = setup_entity(client, "Subsidiary")

        response = client.post(
            "/intercompany/loans",
            json=self.loan_body(
                parent_id, parent_ids, sub_id, sub_ids,
                to_loan_account_id=parent_ids["2500"],
            ),
        )

        assert response.status_code == 409
        assert "Manual reconciliation required" in response.json()["detail"]
        assert balance_of(client, parent_id, parent_ids["1500"]) == "25000.0000"
        assert balance_of(client, sub_id, sub_ids["1000"]) == "0.0000"
