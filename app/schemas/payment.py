"""
Pydantic schemas for PayHere payments
"""

from pydantic import BaseModel, Field
from typing import Optional

class PaymentStartRequest(BaseModel):
    """Customer request to pay for an order; the amount is always the order total"""
    order_id: str = Field(..., min_length=1, max_length=36, description="Order to pay for")

    class Config:
        extra = "forbid"

class PaymentStartResponse(BaseModel):
    """Signed PayHere checkout details"""
    hash: str
    merchant_id: str
    order_id: str
    amount: str
    currency: str
    payment_record_id: str
    checkout: dict

class PaymentCallbackResponse(BaseModel):
    status: str
    message: Optional[str] = None
    payment_status: Optional[str] = None
    duplicate: Optional[bool] = None
