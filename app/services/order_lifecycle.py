"""
Order lifecycle manager
Enforces the fulfillment state machine and triggers customer notifications.

    pending -> confirmed -> preparing -> ready -> completed
    pending, confirmed -> cancelled
"""

import logging

from app.models.order import Order
from app.utils.error_handler import InvalidTransition, OrderNotFound

logger = logging.getLogger(__name__)

class OrderLifecycleManager:
    """Validates and applies status transitions"""

    # Valid status transitions for order state machine
    VALID_STATUS_TRANSITIONS = {
        "pending": {"confirmed", "cancelled"},
        "confirmed": {"preparing", "cancelled"},
        "preparing": {"ready"},
        "ready": {"completed"},
        "completed": set(),
        "cancelled": set(),
    }

    # Statuses the customer hears about by SMS
    NOTIFY_STATUSES = {"preparing", "ready", "completed"}

    def __init__(self, repository, notifier=None):
        self.repository = repository
        self.notifier = notifier

    def can_transition(self, current_status: str, requested_status: str) -> bool:
        return requested_status in self.VALID_STATUS_TRANSITIONS.get(current_status, set())

    def transition(self, order_id: str, requested_status: str) -> Order:
        """Move an order to ``requested_status``.

        Re-requesting the current status is a no-op. The write is a
        compare-and-swap on the status read here, so a concurrent change
        between read and write is reported as an invalid transition.
        """
        order = self.repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        current_status = order.status
        if current_status == requested_status:
            logger.info(f"Order {order_id} already {requested_status}, nothing to do")
            return order

        if not self.can_transition(current_status, requested_status):
            raise InvalidTransition(current_status, requested_status)

        updated = self.repository.update_status(order_id, requested_status, expected_status=current_status)
        if updated is None:
            latest = self.repository.find_by_id(order_id)
            logger.warning(
                f"Order {order_id} changed concurrently while moving {current_status} -> {requested_status}"
            )
            raise InvalidTransition(latest.status if latest else current_status, requested_status)

        logger.info(f"Order {order_id} status {current_status} -> {requested_status}")

        if requested_status in self.NOTIFY_STATUSES:
            self._notify(updated, requested_status)

        return updated

    def confirm_if_pending(self, order_id: str) -> Order:
        """Advance a paid order to confirmed unless staff already moved it on"""
        order = self.repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if order.status != "pending":
            return order
        try:
            return self.transition(order_id, "confirmed")
        except InvalidTransition:
            # Lost a race with a staff update; the stored status stands
            return self.repository.find_by_id(order_id)

    def _notify(self, order: Order, status: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_status_change(order, status)
        except Exception as e:
            logger.error(f"Status notification for order {order.id} ({status}) failed: {e}")
