"""
SMS notification service
Sends templated order messages through Notify.lk (default) or Send.lk and
keeps an sms_logs row per message (pending -> sent/failed).
"""

from decimal import Decimal
from typing import Optional
import logging

import requests
from sqlalchemy.orm import Session

from app import config
from app.models.sms_log import SMSLog
from app.utils.error_handler import NotificationDeliveryFailure
from app.utils.phone import to_msisdn

logger = logging.getLogger(__name__)

NOTIFY_LK_URL = "https://app.notify.lk/api/v1/"
SEND_LK_URL = "https://sms.send.lk/api/v3/"

class SMSService:
    """Notification dispatcher backed by a third-party SMS HTTP API"""

    def __init__(
        self,
        db: Session,
        provider: Optional[str] = None,
        api_url: Optional[str] = None,
        user_id: Optional[str] = None,
        api_key: Optional[str] = None,
        password: Optional[str] = None,
        sender_id: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.db = db
        self.provider = provider or config.SMS_PROVIDER
        self.user_id = config.SMS_USER_ID if user_id is None else user_id
        self.api_key = config.SMS_API_KEY if api_key is None else api_key
        self.password = config.SMS_PASSWORD if password is None else password
        self.timeout = timeout or config.SMS_TIMEOUT_SECONDS

        if self.provider == "notify.lk":
            self.api_url = api_url or config.SMS_API_URL or NOTIFY_LK_URL
            self.sender_id = sender_id or config.SMS_SENDER_ID or "NotifyDEMO"
        else:
            self.api_url = api_url or config.SMS_API_URL or SEND_LK_URL
            self.sender_id = sender_id or config.SMS_SENDER_ID or "DineEasy"

    @property
    def demo_mode(self) -> bool:
        if self.provider == "notify.lk":
            return not (self.user_id and self.api_key and self.password)
        return not self.api_key

    def send_sms(self, phone_number: str, message: str, order_id: Optional[str] = None) -> dict:
        """Send one message.

        Raises NotificationDeliveryFailure when the provider rejects the
        message or cannot be reached.
        """
        log_entry = self._log_sms(phone_number, message, order_id)

        if self.demo_mode:
            logger.info(f"SMS credentials not configured ({self.provider}), message to {phone_number} would be: {message}")
            self._update_status(log_entry, "sent")
            return {"success": True, "message": f"SMS sent (demo mode - {self.provider})"}

        try:
            if self.provider == "notify.lk":
                response = requests.post(
                    f"{self.api_url}send",
                    json={
                        "user_id": self.user_id,
                        "api_key": self.api_key,
                        "sender_id": self.sender_id,
                        "to": to_msisdn(phone_number),
                        "message": message,
                    },
                    timeout=self.timeout,
                )
            else:
                response = requests.post(
                    f"{self.api_url}sms/send",
                    json={
                        "recipient": phone_number,
                        "sender_id": self.sender_id,
                        "message": message,
                    },
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    timeout=self.timeout,
                )
        except requests.RequestException as e:
            logger.error(f"SMS request to {self.provider} failed: {e}")
            self._update_status(log_entry, "failed")
            raise NotificationDeliveryFailure(f"{self.provider} SMS service unavailable", e)

        if self._is_success(response):
            self._update_status(log_entry, "sent")
            logger.info(f"SMS sent to {phone_number} via {self.provider}")
            return {"success": True, "message": f"SMS sent successfully via {self.provider}"}

        self._update_status(log_entry, "failed")
        raise NotificationDeliveryFailure(
            f"Failed to send SMS via {self.provider}: HTTP {response.status_code} {response.text[:200]}"
        )

    def _is_success(self, response: requests.Response) -> bool:
        if not response.ok:
            return False
        if self.provider != "notify.lk":
            return True

        # Notify.lk reports success in the body
        try:
            data = response.json()
        except ValueError:
            data = {}
        body = response.text or ""
        return (
            str(data.get("status")) in ("success", "200")
            or "success" in body
            or "sent" in body
        )

    def _log_sms(self, phone_number: str, message: str, order_id: Optional[str]) -> Optional[SMSLog]:
        try:
            entry = SMSLog(phone_number=phone_number, message=message, order_id=order_id, status="pending")
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
            return entry
        except Exception as e:
            # Log bookkeeping never blocks delivery
            logger.error(f"SMS logging failed: {e}")
            self.db.rollback()
            return None

    def _update_status(self, entry: Optional[SMSLog], status: str) -> None:
        if entry is None:
            return
        try:
            entry.status = status
            self.db.commit()
        except Exception as e:
            logger.error(f"SMS status update failed: {e}")
            self.db.rollback()

    # Message templates

    def send_order_confirmation(self, phone_number: str, order_number: str, total_amount: Decimal,
                                order_id: Optional[str] = None) -> dict:
        message = (
            f"Order confirmed! Order #{order_number} for LKR {total_amount:.2f}. "
            "Thank you for choosing DineEasy! Track your order status online."
        )
        return self.send_sms(phone_number, message, order_id)

    def send_order_status_update(self, phone_number: str, order_number: str, status: str,
                                 order_id: Optional[str] = None) -> dict:
        if status == "preparing":
            message = f"Your order #{order_number} is now being prepared. Estimated time: 15-20 minutes. - DineEasy"
        elif status == "ready":
            message = f"Great news! Your order #{order_number} is ready for pickup/serving. Thank you for your patience! - DineEasy"
        elif status == "completed":
            message = f"Order #{order_number} completed. Thank you for dining with DineEasy! We hope to see you again soon."
        else:
            message = f"Order #{order_number} status updated to: {status}. - DineEasy"
        return self.send_sms(phone_number, message, order_id)

    def send_payment_confirmation(self, phone_number: str, order_number: str, amount: Decimal,
                                  payment_id: str, order_id: Optional[str] = None) -> dict:
        message = (
            f"Payment confirmed for order #{order_number}. Amount: LKR {amount:.2f}. "
            f"Payment ID: {payment_id}. Thank you! - DineEasy"
        )
        return self.send_sms(phone_number, message, order_id)

    # Order-level hooks used by the lifecycle manager and payment service

    def notify_order_placed(self, order) -> dict:
        return self.send_order_confirmation(order.customer.phone, order.order_number, order.total_amount, order.id)

    def notify_status_change(self, order, status: str) -> dict:
        return self.send_order_status_update(order.customer.phone, order.order_number, status, order.id)

    def notify_payment_received(self, order, amount: Decimal, payment_id: str) -> dict:
        return self.send_payment_confirmation(order.customer.phone, order.order_number, amount, payment_id or "-", order.id)
