"""
Payment transaction model - one row per payment attempt
"""

from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.order import generate_uuid

class PaymentTransaction(Base):
    """Payment attempt against an order"""
    __tablename__ = "payment_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="LKR", nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, paid, failed, cancelled, chargedback, unknown
    payment_method = Column(String(30), default="payhere", nullable=False)
    payhere_payment_id = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    order = relationship("Order", back_populates="payment_transactions")

    def __repr__(self):
        return f"<PaymentTransaction(id={self.id}, order_id={self.order_id}, status='{self.status}')>"
