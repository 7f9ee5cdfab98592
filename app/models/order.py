"""
Order model for database operations
"""

import uuid

from sqlalchemy import Column, String, DateTime, Text, Numeric, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

ORDER_STATUSES = ("pending", "confirmed", "preparing", "ready", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "completed", "failed", "cancelled")

def generate_uuid() -> str:
    return str(uuid.uuid4())

class Order(Base):
    """Order entity model

    Line items are stored as a JSON snapshot of the menu at order time and
    are never modified after placement.
    """
    __tablename__ = "orders"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_number = Column(String(50), unique=True, index=True, nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    table_id = Column(String(36), ForeignKey("restaurant_tables.id"), nullable=True)
    order_type = Column(String(20), default="takeaway", nullable=False)  # dine_in, takeaway
    items = Column(JSON, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)
    payment_status = Column(String(20), default="pending", nullable=False)
    payment_id = Column(String(100), nullable=True)
    special_instructions = Column(Text, nullable=True)
    estimated_ready_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", back_populates="orders")
    table = relationship("RestaurantTable")
    payment_transactions = relationship("PaymentTransaction", back_populates="order")
    
    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status}', payment_status='{self.payment_status}')>"
