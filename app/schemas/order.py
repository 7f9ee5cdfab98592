"""
Pydantic schemas for Order operations
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, Literal
from datetime import datetime

from app.models.order import ORDER_STATUSES, PAYMENT_STATUSES

OrderStatus = Literal[ORDER_STATUSES]
PaymentStatus = Literal[PAYMENT_STATUSES]

class OrderItemCreate(BaseModel):
    """Line item as submitted by the customer; unknown fields are rejected"""
    menu_item_id: str = Field(..., min_length=1, max_length=36, description="Menu item id")
    quantity: int = Field(..., ge=1, le=100, description="Quantity ordered")
    special_instructions: Optional[str] = Field(None, max_length=500, description="Note for the kitchen")

    class Config:
        extra = "forbid"

class OrderCreate(BaseModel):
    """Schema for placing a new order"""
    items: list[OrderItemCreate] = Field(..., description="Ordered items")
    table_number: Optional[str] = Field(None, max_length=20, description="Table number or 'takeaway'")
    special_instructions: Optional[str] = Field(None, max_length=1000, description="Order-level note")

    class Config:
        extra = "forbid"

    @validator('items')
    def validate_items(cls, v):
        if not v:
            raise ValueError('No items in order')
        return v

class OrderStatusUpdate(BaseModel):
    """Schema for staff status changes"""
    status: OrderStatus = Field(..., description="Target status")

    class Config:
        extra = "forbid"

class OrderLineItem(BaseModel):
    """Price snapshot taken at order time"""
    menu_item_id: str
    name: str
    price: float
    quantity: int
    special_instructions: Optional[str] = None

class OrderResponse(BaseModel):
    """Schema for order responses"""
    id: str
    order_number: str
    customer_id: str
    table_id: Optional[str]
    order_type: str
    items: list[OrderLineItem]
    subtotal: float
    tax_amount: float
    total_amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    payment_id: Optional[str]
    special_instructions: Optional[str]
    estimated_ready_time: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True

class OrderListResponse(BaseModel):
    """Schema for paginated order list responses"""
    orders: list[OrderResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
