"""
Order repository - storage access for the orders table
Holds no business rules; the lifecycle manager decides what may be written.
"""

from datetime import datetime, date, time, timedelta
from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.models.order import Order
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

class OrderRepository:
    """Pass-through CRUD over orders"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        order_number: str,
        customer_id: str,
        items: list[dict],
        subtotal: Decimal,
        tax_amount: Decimal,
        total_amount: Decimal,
        table_id: Optional[str] = None,
        order_type: str = "takeaway",
        special_instructions: Optional[str] = None,
        estimated_ready_time: Optional[datetime] = None,
    ) -> Order:
        """Insert a new order in pending/pending state"""
        try:
            order = Order(
                order_number=order_number,
                customer_id=customer_id,
                table_id=table_id,
                order_type=order_type,
                items=items,
                subtotal=subtotal,
                tax_amount=tax_amount,
                total_amount=total_amount,
                status="pending",
                payment_status="pending",
                special_instructions=special_instructions,
                estimated_ready_time=estimated_ready_time,
            )
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
            return order
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create order {order_number}: {e}")
            raise DatabaseError(f"Failed to create order: {str(e)}", e)

    def find_by_id(self, order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.id == str(order_id)).first()

    def find_by_order_number(self, order_number: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.order_number == str(order_number)).first()

    def find_by_reference(self, reference: str) -> Optional[Order]:
        """Look up by internal id first, then by human-facing order number"""
        order = self.find_by_id(reference)
        if order is None:
            order = self.find_by_order_number(reference)
        return order

    def update_status(self, order_id: str, status: str, expected_status: Optional[str] = None) -> Optional[Order]:
        """Set the order status.

        With ``expected_status`` the write is a compare-and-swap: it only
        applies while the stored status still equals ``expected_status``.
        Returns None when the order is missing or the swap lost.
        """
        try:
            query = self.db.query(Order).filter(Order.id == order_id)
            if expected_status is not None:
                query = query.filter(Order.status == expected_status)
            updated = query.update(
                {Order.status: status, Order.updated_at: datetime.utcnow()},
                synchronize_session=False,
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update status of order {order_id}: {e}")
            raise DatabaseError(f"Failed to update order status: {str(e)}", e)

        if not updated:
            return None
        order = self.find_by_id(order_id)
        self.db.refresh(order)
        return order

    def update_payment_status(self, order_id: str, payment_status: str, provider_ref: Optional[str] = None) -> Optional[Order]:
        try:
            order = self.find_by_id(order_id)
            if order is None:
                return None
            order.payment_status = payment_status
            if provider_ref:
                order.payment_id = provider_ref
            order.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(order)
            return order
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update payment status of order {order_id}: {e}")
            raise DatabaseError(f"Failed to update payment status: {str(e)}", e)

    def list_orders(
        self,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Order], int]:
        """Paginated orders, newest first"""
        query = self.db.query(Order)

        if status:
            query = query.filter(Order.status == status)
        if date_from:
            query = query.filter(Order.created_at >= datetime.combine(date_from, time.min))
        if date_to:
            query = query.filter(Order.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

        total = query.count()
        offset = (page - 1) * page_size
        orders = query.order_by(Order.created_at.desc()).offset(offset).limit(page_size).all()
        return orders, total

    def todays_orders(self, page: int = 1, page_size: int = 50) -> tuple[list[Order], int]:
        today = datetime.utcnow().date()
        return self.list_orders(date_from=today, date_to=today, page=page, page_size=page_size)
