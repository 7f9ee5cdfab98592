"""
Menu item model
"""

from sqlalchemy import Column, String, DateTime, Text, Numeric, Boolean, Integer
from sqlalchemy.sql import func
from app.database import Base
from app.models.order import generate_uuid

class MenuItem(Base):
    """Menu item offered to customers"""
    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(30), nullable=False, index=True)  # appetizers, mains, desserts, beverages, specials
    image_url = Column(String(500), nullable=True)
    is_available = Column(Boolean, default=True, nullable=False)
    preparation_time = Column(Integer, default=15, nullable=False)  # minutes
    ingredients = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<MenuItem(id={self.id}, name='{self.name}', price={self.price})>"
