"""
Customer service - customers are identified by phone number, no password
"""

from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.models.customer import Customer
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

class CustomerService:

    def __init__(self, db: Session):
        self.db = db

    def find_by_phone(self, phone: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.phone == phone).first()

    def get_by_id(self, customer_id: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def find_or_create(self, name: str, phone: str) -> Customer:
        """Return the customer for ``phone``, creating it on first visit"""
        customer = self.find_by_phone(phone)
        if customer:
            return customer

        try:
            customer = Customer(name=name.strip(), phone=phone)
            self.db.add(customer)
            self.db.commit()
            self.db.refresh(customer)
            logger.info(f"Registered new customer {customer.id}")
            return customer
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create customer: {e}")
            raise DatabaseError(f"Failed to create customer: {str(e)}", e)
