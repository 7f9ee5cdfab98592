"""
Unit tests for PayHere hash generation and callback verification
"""

from decimal import Decimal

import pytest

from app.services.payhere_gateway import PayHereGateway, format_amount, map_status_code, SANDBOX_URL, LIVE_URL
from app.utils.error_handler import PaymentConfigurationError
from conftest import md5_upper, sign_callback, MERCHANT_ID, MERCHANT_SECRET

@pytest.fixture
def gateway():
    return PayHereGateway(merchant_id=MERCHANT_ID, merchant_secret=MERCHANT_SECRET, currency="LKR", sandbox=True)

class TestOutboundHash:
    """Hash sent with payment initiation"""

    def test_hash_matches_payhere_format(self, gateway):
        inner = md5_upper(MERCHANT_SECRET)
        expected = md5_upper(f"{MERCHANT_ID}ORD-1001" + "1100.00" + "LKR" + inner)
        assert gateway.generate_hash("ORD-1001", 1100) == expected

    def test_amount_always_has_two_decimals(self, gateway):
        assert format_amount(1100) == "1100.00"
        assert format_amount(99.5) == "99.50"
        assert format_amount("250") == "250.00"
        assert format_amount(Decimal("495.17")) == "495.17"
        assert format_amount(0.1 + 0.2) == "0.30"
        assert gateway.generate_hash("X", 1100) == gateway.generate_hash("X", "1100.00")

    def test_hash_is_upper_case_hex(self, gateway):
        value = gateway.generate_hash("ORD-1", 10)
        assert len(value) == 32
        assert value == value.upper()
        int(value, 16)

    def test_missing_credentials_rejected(self):
        gateway = PayHereGateway(merchant_id="", merchant_secret="")
        with pytest.raises(PaymentConfigurationError):
            gateway.generate_hash("ORD-1", 10)

    def test_create_payment_payload(self, gateway):
        payload = gateway.create_payment(
            order_id="ORD-1",
            amount=1100,
            items="Chicken Kottu x2",
            first_name="Nimal",
            last_name="Perera",
            phone="+94771234567",
            return_url="http://localhost/payment/success",
            cancel_url="http://localhost/payment/cancel",
            notify_url="http://localhost/api/v1/payments/payhere/callback",
        )
        assert payload["merchant_id"] == MERCHANT_ID
        assert payload["amount"] == "1100.00"
        assert payload["currency"] == "LKR"
        assert payload["hash"] == gateway.generate_hash("ORD-1", 1100)
        assert payload["country"] == "Sri Lanka"
        assert payload["delivery_country"] == "Sri Lanka"
        assert payload["checkout_url"] == SANDBOX_URL

    def test_live_checkout_url(self):
        gateway = PayHereGateway(merchant_id=MERCHANT_ID, merchant_secret=MERCHANT_SECRET, sandbox=False)
        assert gateway.checkout_url == LIVE_URL

class TestCallbackVerification:
    """Inbound notify signature checks"""

    def test_valid_signature(self, gateway):
        payload = sign_callback("ORD-1", "1100.00", "2")
        result = gateway.verify_callback(**{k: v for k, v in payload.items() if k != "payment_id"})
        assert result.is_valid
        assert result.status == "paid"
        assert result.order_id == "ORD-1"

    def test_verification_is_deterministic(self, gateway):
        payload = {k: v for k, v in sign_callback("ORD-1", "1100.00", "2").items() if k != "payment_id"}
        assert gateway.verify_callback(**payload) == gateway.verify_callback(**payload)

    @pytest.mark.parametrize("field,tampered", [
        ("payhere_amount", "1100.01"),
        ("order_id", "ORD-2"),
        ("status_code", "0"),
        ("payhere_currency", "USD"),
        ("merchant_id", "1211148"),
    ])
    def test_any_changed_field_invalidates(self, gateway, field, tampered):
        payload = {k: v for k, v in sign_callback("ORD-1", "1100.00", "2").items() if k != "payment_id"}
        payload[field] = tampered
        assert not gateway.verify_callback(**payload).is_valid

    def test_tampered_signature(self, gateway):
        payload = {k: v for k, v in sign_callback("ORD-1", "1100.00", "2").items() if k != "payment_id"}
        payload["md5sig"] = payload["md5sig"][:-1] + ("0" if payload["md5sig"][-1] != "0" else "1")
        assert not gateway.verify_callback(**payload).is_valid

    def test_lower_case_signature_rejected(self, gateway):
        payload = {k: v for k, v in sign_callback("ORD-1", "1100.00", "2").items() if k != "payment_id"}
        payload["md5sig"] = payload["md5sig"].lower()
        assert not gateway.verify_callback(**payload).is_valid

    def test_non_ascii_signature_is_just_invalid(self, gateway):
        payload = {k: v for k, v in sign_callback("ORD-1", "1100.00", "2").items() if k != "payment_id"}
        payload["md5sig"] = "ඔබ"
        assert not gateway.verify_callback(**payload).is_valid

class TestStatusCodes:

    @pytest.mark.parametrize("code,status", [
        ("2", "paid"),
        ("0", "pending"),
        ("-1", "cancelled"),
        ("-2", "failed"),
        ("-3", "chargedback"),
        (2, "paid"),
        ("7", "unknown"),
        ("abc", "unknown"),
        (None, "unknown"),
    ])
    def test_mapping(self, code, status):
        assert map_status_code(code) == status
