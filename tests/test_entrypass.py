"""API tests for /entrypass."""

from datetime import datetime, timedelta

from ticketing.controller.helpers import utcnow
from ticketing.models.entrypass_model import EntryPass


def _purchase(client, headers, head_count=2, amount=200, payment_id="pay_001"):
    return client.post("/api/v1/entrypass/purchase", headers=headers, json={
        "head_count": head_count, "amount": amount, "payment_id": payment_id,
        "transaction_info": {"method": "upi"},
    })


class TestEntryPass:

    def test_first_purchase_creates_pass(self, client, customer_headers):
        response = _purchase(client, customer_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["head_count"] == 2
        assert data["status"] == "active"
        expiry = datetime.fromisoformat(data["expiry_date"])
        assert timedelta(days=29) < expiry - utcnow() <= timedelta(days=30)

    def test_second_purchase_tops_up(self, client, customer_headers, db):
        _purchase(client, customer_headers, head_count=2, amount=200)
        response = _purchase(client, customer_headers, head_count=3, amount=300, payment_id="pay_002")

        data = response.json()["data"]
        assert data["head_count"] == 5
        assert data["amount"] == 500
        assert data["payment_id"] == "pay_002"
        assert db.query(EntryPass).count() == 1

    def test_top_up_keeps_later_expiry(self, client, customer, customer_headers, db):
        far = utcnow() + timedelta(days=90)
        db.add(EntryPass(user_id=customer.id, head_count=1, amount=100, payment_id="p", expiry_date=far))
        db.commit()

        data = _purchase(client, customer_headers).json()["data"]
        assert datetime.fromisoformat(data["expiry_date"]) == far

    def test_expiration_follows_settings(self, client, admin_headers, customer_headers):
        client.put("/api/v1/admin/settings", headers=admin_headers, json={"entry_pass_expiration_days": 7})
        data = _purchase(client, customer_headers).json()["data"]
        expiry = datetime.fromisoformat(data["expiry_date"])
        assert expiry - utcnow() <= timedelta(days=7)

    def test_expired_pass_is_not_topped_up(self, client, customer, customer_headers, db):
        db.add(EntryPass(user_id=customer.id, head_count=4, amount=100, payment_id="p",
                         expiry_date=utcnow() - timedelta(days=1)))
        db.commit()

        data = _purchase(client, customer_headers, head_count=1).json()["data"]
        assert data["head_count"] == 1
        assert db.query(EntryPass).count() == 2

    def test_invalid_purchase(self, client, customer_headers):
        assert _purchase(client, customer_headers, head_count=0).status_code == 400
        assert _purchase(client, customer_headers, amount=0).status_code == 400
        assert _purchase(client, customer_headers, payment_id="").status_code == 400

    def test_me_without_pass(self, client, customer_headers):
        response = client.get("/api/v1/entrypass/me", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"] is None

    def test_me_with_pass(self, client, customer_headers):
        _purchase(client, customer_headers)
        assert client.get("/api/v1/entrypass/me", headers=customer_headers).json()["data"]["head_count"] == 2
