"""
API tests for PayHere payment start and notify callbacks
"""

from decimal import Decimal

import pytest

from app.auth.auth_handler import auth_handler
from app.models import ActivityLog, Customer, Order, PaymentTransaction, SMSLog
from conftest import MERCHANT_ID, MERCHANT_SECRET, md5_upper, sign_callback

CALLBACK_URL = "/api/v1/payments/payhere/callback"

@pytest.fixture
def order(client, db_session, menu_item, customer_headers):
    response = client.post(
        "/api/v1/orders/",
        json={"items": [{"menu_item_id": "A", "quantity": 2}]},
        headers=customer_headers,
    )
    assert response.status_code == 201
    return db_session.query(Order).filter(Order.id == response.json()["id"]).first()

def reload(db_session, order):
    db_session.expire_all()
    return db_session.query(Order).filter(Order.id == order.id).first()

class TestStartPayment:

    def test_returns_signed_checkout(self, client, order, customer_headers):
        response = client.post("/api/v1/payments/payhere/start", json={"order_id": order.id}, headers=customer_headers)

        assert response.status_code == 200
        data = response.json()
        expected = md5_upper(f"{MERCHANT_ID}{order.id}1100.00LKR{md5_upper(MERCHANT_SECRET)}")
        assert data["hash"] == expected
        assert data["amount"] == "1100.00"
        assert data["currency"] == "LKR"
        assert data["merchant_id"] == MERCHANT_ID
        assert data["checkout"]["notify_url"].endswith("/api/v1/payments/payhere/callback")
        assert data["checkout"]["items"] == "Chicken Kottu x2"
        assert data["checkout"]["first_name"] == "Nimal"
        assert data["checkout"]["last_name"] == "Perera"

    def test_records_pending_transaction(self, client, db_session, order, customer_headers):
        data = client.post("/api/v1/payments/payhere/start", json={"order_id": order.id}, headers=customer_headers).json()

        transaction = db_session.query(PaymentTransaction).filter(PaymentTransaction.id == data["payment_record_id"]).first()
        assert transaction.order_id == order.id
        assert transaction.status == "pending"
        assert transaction.amount == 1100.0

    def test_other_customers_order_not_found(self, client, db_session, order):
        stranger = Customer(name="Kamal", phone="+94770000000")
        db_session.add(stranger)
        db_session.commit()
        headers = {"Authorization": f"Bearer {auth_handler.create_customer_token(stranger)}"}

        response = client.post("/api/v1/payments/payhere/start", json={"order_id": order.id}, headers=headers)

        assert response.status_code == 404
        assert db_session.query(PaymentTransaction).count() == 0

    def test_client_cannot_choose_amount(self, client, db_session, order, customer_headers):
        response = client.post(
            "/api/v1/payments/payhere/start",
            json={"order_id": order.id, "amount": 1},
            headers=customer_headers,
        )

        assert response.status_code == 422
        assert db_session.query(PaymentTransaction).count() == 0

    def test_requires_customer(self, client, order):
        response = client.post("/api/v1/payments/payhere/start", json={"order_id": order.id})
        assert response.status_code == 401

class TestCallback:

    def test_paid_callback_confirms_order(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        assert response.status_code == 200
        assert response.json() == {"status": "success", "message": "Payment processed successfully"}
        order = reload(db_session, order)
        assert order.payment_status == "completed"
        assert order.status == "confirmed"
        assert order.payment_id == "320025071278"

    def test_paid_callback_updates_started_transaction(self, client, db_session, order, customer_headers):
        client.post("/api/v1/payments/payhere/start", json={"order_id": order.id}, headers=customer_headers)

        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        transactions = db_session.query(PaymentTransaction).all()
        assert len(transactions) == 1
        assert transactions[0].status == "paid"
        assert transactions[0].payhere_payment_id == "320025071278"

    def test_callback_without_started_payment_creates_transaction(self, client, db_session, order):
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        transaction = db_session.query(PaymentTransaction).one()
        assert transaction.status == "paid"
        assert transaction.amount == 1100.0

    def test_order_number_reference(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback(order.order_number, "1100.00", "2"))

        assert response.status_code == 200
        assert reload(db_session, order).payment_status == "completed"

    def test_json_body_accepted(self, client, db_session, order):
        response = client.post(CALLBACK_URL, json=sign_callback(order.id, "1100.00", "2"))

        assert response.status_code == 200
        assert reload(db_session, order).payment_status == "completed"

    @pytest.mark.parametrize("status_code", ["2", "0", "-1", "-2", "-3"])
    def test_tampered_amount_rejected(self, client, db_session, order, customer_headers, status_code):
        client.post("/api/v1/payments/payhere/start", json={"order_id": order.id}, headers=customer_headers)
        payload = sign_callback(order.id, "1100.00", status_code)
        payload["payhere_amount"] = "1.00"

        response = client.post(CALLBACK_URL, data=payload)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_SIGNATURE"
        order = reload(db_session, order)
        assert order.payment_status == "pending"
        assert order.status == "pending"
        assert order.payment_id is None
        transaction = db_session.query(PaymentTransaction).one()
        assert transaction.status == "pending"
        assert transaction.payhere_payment_id is None

    @pytest.mark.parametrize("status_code", ["2", "0", "-1", "-2", "-3"])
    def test_wrong_secret_rejected(self, client, db_session, order, customer_headers, status_code):
        client.post("/api/v1/payments/payhere/start", json={"order_id": order.id}, headers=customer_headers)

        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", status_code, secret="guess"))

        assert response.status_code == 401
        order = reload(db_session, order)
        assert order.payment_status == "pending"
        assert order.status == "pending"
        assert db_session.query(PaymentTransaction).one().status == "pending"

    def test_underpaid_callback_leaves_order_unpaid(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1.00", "2"))

        assert response.status_code == 200
        assert response.json() == {"status": "processed", "payment_status": "underpaid"}
        order = reload(db_session, order)
        assert order.payment_status == "pending"
        assert order.status == "pending"
        # the provider's record of the short payment is kept
        assert db_session.query(PaymentTransaction).one().amount == Decimal("1.00")
        assert db_session.query(SMSLog).filter(SMSLog.order_id == order.id).count() == 1

    def test_other_currency_does_not_settle(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2", currency="USD"))

        assert response.json()["payment_status"] == "underpaid"
        assert reload(db_session, order).payment_status == "pending"

    def test_overpayment_settles(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1200.00", "2"))

        assert response.json()["status"] == "success"
        assert reload(db_session, order).payment_status == "completed"

    def test_full_payment_after_short_one_completes(self, client, db_session, order):
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1.00", "2"))
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        order = reload(db_session, order)
        assert order.payment_status == "completed"
        assert order.status == "confirmed"

    def test_replayed_callback_is_idempotent(self, client, db_session, order):
        payload = sign_callback(order.id, "1100.00", "2")

        first = client.post(CALLBACK_URL, data=payload)
        second = client.post(CALLBACK_URL, data=payload)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["duplicate"] is True
        order = reload(db_session, order)
        assert order.payment_status == "completed"
        assert order.status == "confirmed"
        assert db_session.query(PaymentTransaction).count() == 1
        # placement confirmation plus a single payment confirmation
        assert db_session.query(SMSLog).filter(SMSLog.order_id == order.id).count() == 2

    def test_paid_callback_leaves_progressed_order_alone(self, client, db_session, order, staff_headers):
        client.patch(f"/api/v1/orders/{order.id}/status", json={"status": "confirmed"}, headers=staff_headers)
        client.patch(f"/api/v1/orders/{order.id}/status", json={"status": "preparing"}, headers=staff_headers)

        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        order = reload(db_session, order)
        assert order.payment_status == "completed"
        assert order.status == "preparing"

    def test_failed_callback(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "-2"))

        assert response.status_code == 200
        assert response.json() == {"status": "processed", "payment_status": "failed"}
        order = reload(db_session, order)
        assert order.payment_status == "failed"
        assert order.status == "pending"

    def test_retry_after_failure_completes(self, client, db_session, order):
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "-2"))
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        order = reload(db_session, order)
        assert order.payment_status == "completed"
        assert order.status == "confirmed"

    def test_cancelled_callback(self, client, db_session, order):
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "-1"))
        assert reload(db_session, order).payment_status == "cancelled"

    def test_chargeback_after_payment_keeps_order_paid(self, client, db_session, order):
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "-3"))

        assert response.json() == {"status": "processed", "payment_status": "chargedback"}
        assert reload(db_session, order).payment_status == "completed"
        assert db_session.query(PaymentTransaction).one().status == "chargedback"

    def test_unknown_status_code_leaves_order(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "7"))

        assert response.json()["payment_status"] == "unknown"
        assert reload(db_session, order).payment_status == "pending"

    def test_unknown_order(self, client, db_session, order):
        response = client.post(CALLBACK_URL, data=sign_callback("missing-order", "1100.00", "2"))

        assert response.status_code == 404
        assert db_session.query(PaymentTransaction).count() == 0
        assert reload(db_session, order).payment_status == "pending"

    @pytest.mark.parametrize("field", ["merchant_id", "order_id", "payhere_amount", "payhere_currency", "status_code", "md5sig"])
    def test_missing_field_rejected(self, client, db_session, order, field):
        payload = sign_callback(order.id, "1100.00", "2")
        del payload[field]

        response = client.post(CALLBACK_URL, data=payload)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MALFORMED_CALLBACK"
        assert reload(db_session, order).payment_status == "pending"

    def test_non_object_json_rejected(self, client):
        response = client.post(CALLBACK_URL, json=["not", "a", "form"])
        assert response.status_code == 400

    def test_callbacks_are_audited(self, client, db_session, order):
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2", secret="guess"))
        client.post(CALLBACK_URL, data=sign_callback(order.id, "1100.00", "2"))

        entries = db_session.query(ActivityLog).filter(ActivityLog.actor == "payhere").order_by(ActivityLog.id).all()
        assert [entry.status_code for entry in entries] == [401, 200]
