"""
Payment transaction repository
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.models.payment_transaction import PaymentTransaction
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

class PaymentTransactionRepository:

    def __init__(self, db: Session):
        self.db = db

    def create(self, order_id: str, amount: Decimal, currency: str = "LKR", status: str = "pending",
               payment_method: str = "payhere", payhere_payment_id: Optional[str] = None) -> PaymentTransaction:
        try:
            transaction = PaymentTransaction(
                order_id=order_id,
                amount=amount,
                currency=currency,
                status=status,
                payment_method=payment_method,
                payhere_payment_id=payhere_payment_id,
            )
            self.db.add(transaction)
            self.db.commit()
            self.db.refresh(transaction)
            return transaction
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create payment transaction for order {order_id}: {e}")
            raise DatabaseError(f"Failed to create payment record: {str(e)}", e)

    def latest_for_order(self, order_id: str) -> Optional[PaymentTransaction]:
        return (
            self.db.query(PaymentTransaction)
            .filter(PaymentTransaction.order_id == order_id)
            .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.id.desc())
            .first()
        )

    def update_status(self, transaction: PaymentTransaction, status: str,
                      payhere_payment_id: Optional[str] = None) -> PaymentTransaction:
        try:
            transaction.status = status
            if payhere_payment_id:
                transaction.payhere_payment_id = payhere_payment_id
            transaction.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(transaction)
            return transaction
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update payment transaction {transaction.id}: {e}")
            raise DatabaseError(f"Failed to update payment transaction: {str(e)}", e)
