"""
Payment service
Starts PayHere payments and reconciles verified notify callbacks with orders.
"""

from typing import Optional
import logging

from app import config
from app.services.payhere_gateway import PayHereGateway, format_amount
from app.services.order_lifecycle import OrderLifecycleManager
from app.utils.error_handler import InvalidSignature, MalformedCallback, OrderNotFound
from app.utils.money import parse_money, to_money

logger = logging.getLogger(__name__)

REQUIRED_CALLBACK_FIELDS = (
    "merchant_id",
    "order_id",
    "payhere_amount",
    "payhere_currency",
    "status_code",
    "md5sig",
)

# Gateway outcome -> order payment_status; other outcomes leave the order alone
ORDER_PAYMENT_STATUS = {
    "paid": "completed",
    "failed": "failed",
    "cancelled": "cancelled",
}

class PaymentService:
    """Payment initiation and callback reconciliation"""

    def __init__(
        self,
        gateway: PayHereGateway,
        order_repository,
        payment_repository,
        lifecycle: OrderLifecycleManager,
        notifier=None,
        base_url: Optional[str] = None,
    ):
        self.gateway = gateway
        self.orders = order_repository
        self.payments = payment_repository
        self.lifecycle = lifecycle
        self.notifier = notifier
        self.base_url = (base_url or config.PUBLIC_BASE_URL).rstrip("/")

    def start_payment(self, customer: dict, order_id: str) -> dict:
        """Record a pending payment attempt and return the signed checkout payload.

        The signed amount is always the order total fixed at placement.
        """
        order = self.orders.find_by_id(order_id)
        if order is None or order.customer_id != customer["customer_id"]:
            raise OrderNotFound(order_id)

        amount = to_money(order.total_amount)
        transaction = self.payments.create(
            order_id=order.id,
            amount=amount,
            currency=self.gateway.currency,
            status="pending",
        )

        name_parts = (customer.get("name") or "Guest").split(" ", 1)
        items = ", ".join(f"{item['name']} x{item['quantity']}" for item in order.items)
        checkout = self.gateway.create_payment(
            order_id=order.id,
            amount=amount,
            items=items or f"Order {order.order_number}",
            first_name=name_parts[0],
            last_name=name_parts[1] if len(name_parts) > 1 else "",
            phone=customer.get("phone") or "",
            return_url=f"{self.base_url}/payment/success?order_id={order.id}",
            cancel_url=f"{self.base_url}/payment/cancel?order_id={order.id}",
            notify_url=f"{self.base_url}/api/v1/payments/payhere/callback",
        )

        logger.info(f"Started PayHere payment {transaction.id} for order {order.order_number} ({format_amount(amount)})")
        return {
            "hash": checkout["hash"],
            "merchant_id": self.gateway.merchant_id,
            "order_id": order.id,
            "amount": format_amount(amount),
            "currency": self.gateway.currency,
            "payment_record_id": transaction.id,
            "checkout": checkout,
        }

    def handle_callback(self, payload: dict) -> dict:
        """Authenticate a PayHere notify callback and apply its outcome.

        Nothing is written unless the signature verifies. Replays of a
        callback for an already completed payment return without side
        effects, so gateway retries are harmless.
        """
        missing = [field for field in REQUIRED_CALLBACK_FIELDS if payload.get(field) in (None, "")]
        if missing:
            raise MalformedCallback(missing)

        verification = self.gateway.verify_callback(
            merchant_id=payload["merchant_id"],
            order_id=payload["order_id"],
            payhere_amount=payload["payhere_amount"],
            payhere_currency=payload["payhere_currency"],
            status_code=payload["status_code"],
            md5sig=payload["md5sig"],
        )
        if not verification.is_valid:
            logger.warning(f"PayHere callback verification failed for order: {verification.order_id}")
            raise InvalidSignature(f"Signature mismatch for order reference {verification.order_id}")

        order = self.orders.find_by_reference(verification.order_id)
        if order is None:
            raise OrderNotFound(verification.order_id)

        payment_id = payload.get("payment_id")
        gateway_status = verification.status

        if order.payment_status == "completed":
            if gateway_status == "paid":
                logger.info(f"Duplicate PayHere callback for already paid order {order.order_number}, ignoring")
                return self._result(gateway_status, duplicate=True)
            # completed is terminal for the order; keep the provider's word on the transaction only
            self._record_transaction(order, verification, payment_id)
            logger.warning(f"PayHere reported '{gateway_status}' for already paid order {order.order_number}")
            return self._result(gateway_status)

        self._record_transaction(order, verification, payment_id)

        if gateway_status == "paid" and not self._covers_total(verification, order):
            logger.warning(
                f"PayHere paid {verification.amount} {verification.currency} for order {order.order_number} "
                f"but the total is {format_amount(order.total_amount)} {self.gateway.currency}, order left unpaid"
            )
            return self._result("underpaid")

        if gateway_status == "paid":
            self.orders.update_payment_status(order.id, "completed", payment_id)
            order = self.lifecycle.confirm_if_pending(order.id)
            logger.info(
                f"Payment successful for order: {order.order_number}, amount: {verification.amount} {verification.currency}"
            )
            self._notify_payment(order, verification, payment_id)
        elif gateway_status in ORDER_PAYMENT_STATUS:
            self.orders.update_payment_status(order.id, ORDER_PAYMENT_STATUS[gateway_status], payment_id)
            logger.info(f"Payment {gateway_status} for order: {order.order_number}")
        else:
            logger.info(f"PayHere reported '{gateway_status}' for order {order.order_number}, order left unchanged")

        return self._result(gateway_status)

    def _covers_total(self, verification, order) -> bool:
        """A paid callback settles the order only in its currency and for at least its total"""
        amount = parse_money(verification.amount)
        total = to_money(order.total_amount)
        if amount is None or verification.currency != self.gateway.currency:
            return False
        if amount > total:
            logger.warning(f"PayHere amount {amount} exceeds order {order.order_number} total {total}")
        return amount >= total

    def _record_transaction(self, order, verification, payment_id: Optional[str]) -> None:
        transaction = self.payments.latest_for_order(order.id)
        if transaction is None:
            amount = parse_money(verification.amount)
            if amount is None:
                amount = order.total_amount
            self.payments.create(
                order_id=order.id,
                amount=amount,
                currency=verification.currency,
                status=verification.status,
                payhere_payment_id=payment_id,
            )
        else:
            self.payments.update_status(transaction, verification.status, payment_id)

    def _notify_payment(self, order, verification, payment_id: Optional[str]) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_payment_received(order, to_money(verification.amount), payment_id)
        except Exception as e:
            logger.error(f"Payment confirmation SMS for order {order.id} failed: {e}")

    @staticmethod
    def _result(gateway_status: str, duplicate: bool = False) -> dict:
        if gateway_status == "paid":
            result = {"status": "success", "message": "Payment processed successfully"}
        else:
            result = {"status": "processed", "payment_status": gateway_status}
        if duplicate:
            result["duplicate"] = True
        return result
