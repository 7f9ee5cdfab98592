"""
Pydantic schemas for staff and customer authentication
"""

from pydantic import BaseModel, Field, validator, EmailStr
from typing import Optional
from datetime import datetime

from app.utils.phone import validate_sri_lankan_phone, format_phone_number

STAFF_ROLES = ['admin', 'manager', 'kitchen']

class StaffLogin(BaseModel):
    """Schema for staff login"""
    email: EmailStr = Field(..., description="Staff email address")
    password: str = Field(..., min_length=1, max_length=128, description="Password")

    @validator('email')
    def normalise_email(cls, v):
        return v.strip().lower()

class StaffCreate(BaseModel):
    """Schema for seeding a staff account"""
    email: EmailStr = Field(..., description="Staff email address")
    password: str = Field(..., min_length=8, max_length=72, description="Password (minimum 8 characters)")
    full_name: str = Field(..., min_length=1, max_length=100, description="Full name")
    role: str = Field("admin", description="Staff role")

    @validator('role')
    def validate_role(cls, v):
        if v not in STAFF_ROLES:
            raise ValueError(f'Role must be one of: {", ".join(STAFF_ROLES)}')
        return v

class StaffResponse(BaseModel):
    """Staff account without credentials"""
    id: str
    email: str
    full_name: str
    role: str
    is_active: bool
    last_login: Optional[datetime]

    class Config:
        from_attributes = True

class StaffLoginResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: StaffResponse

class CustomerLogin(BaseModel):
    """Schema for customer identification after scanning a table QR code"""
    name: str = Field(..., min_length=1, max_length=100, description="Customer name")
    phone: str = Field(..., max_length=20, description="Sri Lankan mobile number")
    table_number: Optional[str] = Field(None, max_length=20, description="Table number or 'takeaway'")

    @validator('name')
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v

    @validator('phone')
    def validate_phone(cls, v):
        if not validate_sri_lankan_phone(v):
            raise ValueError('Please enter a valid Sri Lankan phone number')
        return format_phone_number(v)

class CustomerResponse(BaseModel):
    id: str
    name: str
    phone: str
    table_number: Optional[str] = None

class CustomerLoginResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    customer: CustomerResponse
