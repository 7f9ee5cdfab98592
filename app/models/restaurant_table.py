"""
Restaurant table model
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer
from sqlalchemy.sql import func
from app.database import Base
from app.models.order import generate_uuid

class RestaurantTable(Base):
    __tablename__ = "restaurant_tables"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    table_number = Column(String(20), unique=True, index=True, nullable=False)
    qr_code = Column(String(500), nullable=True)
    capacity = Column(Integer, default=4, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<RestaurantTable(id={self.id}, table_number='{self.table_number}')>"
