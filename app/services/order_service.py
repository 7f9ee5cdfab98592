"""
Order placement service
Validates the cart against the menu, snapshots prices and computes totals.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Union
import logging
import random
import time

from sqlalchemy.orm import Session

from app import config
from app.models.order import Order
from app.models.customer import Customer
from app.models.menu_item import MenuItem
from app.models.restaurant_table import RestaurantTable
from app.repositories.order_repository import OrderRepository
from app.schemas.order import OrderItemCreate
from app.utils.error_handler import MenuItemUnavailable
from app.utils.money import to_money

logger = logging.getLogger(__name__)

BASE_PREPARATION_MINUTES = 5

def generate_order_number() -> str:
    """ORD + epoch milliseconds + 3 random digits"""
    return f"ORD{int(time.time() * 1000)}{random.randint(0, 999):03d}"

def calculate_tax(subtotal: Decimal, tax_rate: Union[Decimal, float, str, None] = None) -> Decimal:
    rate = config.TAX_RATE if tax_rate is None else tax_rate
    return to_money(Decimal(str(rate)) * to_money(subtotal))

def calculate_total(subtotal: Decimal, tax_amount: Decimal = Decimal("0.00")) -> Decimal:
    # exact, both parts are whole cents
    return to_money(subtotal) + to_money(tax_amount)

def estimate_ready_time(preparation_minutes: int, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.utcnow()
    return now + timedelta(minutes=BASE_PREPARATION_MINUTES + preparation_minutes)

class OrderService:
    """Customer-facing order placement"""

    def __init__(self, db: Session, repository: Optional[OrderRepository] = None, notifier=None):
        self.db = db
        self.repository = repository or OrderRepository(db)
        self.notifier = notifier

    def place_order(
        self,
        customer_id: str,
        items: list[OrderItemCreate],
        table_number: Optional[str] = None,
        special_instructions: Optional[str] = None,
    ) -> Order:
        """Create a pending order; totals are fixed here and never recomputed"""
        line_items = []
        subtotal = Decimal("0.00")
        preparation_minutes = 0

        for item in items:
            menu_item = self.db.query(MenuItem).filter(MenuItem.id == item.menu_item_id).first()
            if not menu_item or not menu_item.is_available:
                raise MenuItemUnavailable(item.menu_item_id)

            price = to_money(menu_item.price)
            subtotal += price * item.quantity
            preparation_minutes += (menu_item.preparation_time or 15) * item.quantity
            line_items.append({
                "menu_item_id": menu_item.id,
                "name": menu_item.name,
                "price": float(price),
                "quantity": item.quantity,
                "special_instructions": item.special_instructions,
            })

        subtotal = to_money(subtotal)
        tax_amount = calculate_tax(subtotal)
        total_amount = calculate_total(subtotal, tax_amount)

        table_id = None
        order_type = "takeaway"
        if table_number and table_number.lower() != "takeaway":
            order_type = "dine_in"
            table = self.db.query(RestaurantTable).filter(
                RestaurantTable.table_number == table_number,
                RestaurantTable.is_active == True
            ).first()
            if table:
                table_id = table.id
            else:
                logger.warning(f"Unknown table number '{table_number}' on order for customer {customer_id}")

        order = self.repository.create(
            order_number=generate_order_number(),
            customer_id=customer_id,
            items=line_items,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=total_amount,
            table_id=table_id,
            order_type=order_type,
            special_instructions=special_instructions,
            estimated_ready_time=estimate_ready_time(preparation_minutes),
        )
        logger.info(f"Created order {order.order_number} ({order.id}) total {total_amount:.2f}")

        self._touch_customer(customer_id)
        self._notify(order)
        return order

    def _touch_customer(self, customer_id: str) -> None:
        try:
            customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
            if customer:
                customer.last_order_date = datetime.utcnow()
                self.db.commit()
        except Exception as e:
            # Non-critical update
            self.db.rollback()
            logger.warning(f"Could not update last order date for customer {customer_id}: {e}")

    def _notify(self, order: Order) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_order_placed(order)
        except Exception as e:
            logger.error(f"Order confirmation SMS for order {order.id} failed: {e}")
