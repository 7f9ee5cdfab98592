"""
PayHere payment gateway adapter
Builds signed checkout payloads and authenticates notify callbacks.

PayHere hash format:
    MD5(merchant_id + order_id + amount + currency + upper(MD5(merchant_secret)))
Callback signature (md5sig):
    MD5(merchant_id + order_id + payhere_amount + payhere_currency + status_code + upper(MD5(merchant_secret)))
Both digests are upper-case hex.
"""

import hashlib
import hmac
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from app.utils.error_handler import PaymentConfigurationError
from app.utils.money import to_money


SANDBOX_URL = "https://sandbox.payhere.lk/pay/checkout"
LIVE_URL = "https://www.payhere.lk/pay/checkout"

# PayHere status_code -> payment outcome
STATUS_CODES = {
    2: "paid",
    0: "pending",
    -1: "cancelled",
    -2: "failed",
    -3: "chargedback",
}

def _md5_upper(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()

def format_amount(amount: Union[Decimal, int, float, str]) -> str:
    """Amounts are always signed with exactly two decimal places"""
    return str(to_money(amount))

def map_status_code(status_code: Union[int, str, None]) -> str:
    try:
        return STATUS_CODES.get(int(status_code), "unknown")
    except (TypeError, ValueError):
        return "unknown"

@dataclass(frozen=True)
class CallbackVerification:
    """Outcome of checking a PayHere notify callback"""
    is_valid: bool
    status: str
    order_id: str
    amount: str
    currency: str

class PayHereGateway:
    """Signs outbound payment requests and verifies inbound callbacks"""

    def __init__(self, merchant_id: str, merchant_secret: str, currency: str = "LKR", sandbox: bool = True):
        self.merchant_id = merchant_id
        self.merchant_secret = merchant_secret
        self.currency = currency
        self.sandbox = sandbox

    @property
    def checkout_url(self) -> str:
        return SANDBOX_URL if self.sandbox else LIVE_URL

    def _require_credentials(self):
        if not self.merchant_id or not self.merchant_secret:
            raise PaymentConfigurationError("PayHere merchant credentials not configured")

    def _inner_hash(self) -> str:
        return _md5_upper(self.merchant_secret)

    def generate_hash(self, order_id: str, amount: Union[Decimal, int, float, str], currency: Optional[str] = None) -> str:
        """Hash sent with every payment initiation request"""
        self._require_credentials()
        currency = currency or self.currency
        return _md5_upper(
            f"{self.merchant_id}{order_id}{format_amount(amount)}{currency}{self._inner_hash()}"
        )

    def create_payment(
        self,
        order_id: str,
        amount: Union[Decimal, int, float],
        items: str,
        first_name: str,
        last_name: str,
        phone: str,
        return_url: str,
        cancel_url: str,
        notify_url: str,
        email: str = "",
        address: str = "",
        city: str = "",
        country: str = "Sri Lanka",
        custom_fields: Optional[dict] = None,
    ) -> dict:
        """Checkout form payload for the PayHere JS SDK or a redirect form"""
        payload = {
            "sandbox": self.sandbox,
            "checkout_url": self.checkout_url,
            "merchant_id": self.merchant_id,
            "return_url": return_url,
            "cancel_url": cancel_url,
            "notify_url": notify_url,
            "order_id": order_id,
            "items": items,
            "amount": format_amount(amount),
            "currency": self.currency,
            "hash": self.generate_hash(order_id, amount),
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "phone": phone,
            "address": address,
            "city": city,
            "country": country,
            "delivery_address": address,
            "delivery_city": city,
            "delivery_country": country,
        }
        if custom_fields:
            payload.update(custom_fields)
        return payload

    def expected_signature(self, merchant_id: str, order_id: str, amount: str, currency: str, status_code: str) -> str:
        self._require_credentials()
        return _md5_upper(f"{merchant_id}{order_id}{amount}{currency}{status_code}{self._inner_hash()}")

    def verify_callback(
        self,
        merchant_id: str,
        order_id: str,
        payhere_amount: str,
        payhere_currency: str,
        status_code: str,
        md5sig: str,
    ) -> CallbackVerification:
        """Recompute the callback signature from the fields exactly as received"""
        expected = self.expected_signature(
            str(merchant_id), str(order_id), str(payhere_amount), str(payhere_currency), str(status_code)
        )
        is_valid = hmac.compare_digest(expected.encode("utf-8"), str(md5sig).encode("utf-8"))

        return CallbackVerification(
            is_valid=is_valid,
            status=map_status_code(status_code),
            order_id=str(order_id),
            amount=str(payhere_amount),
            currency=str(payhere_currency),
        )
