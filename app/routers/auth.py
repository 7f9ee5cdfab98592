"""
Authentication endpoints for staff and customers
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from sqlalchemy.orm import Session
import logging

from app import config
from app.database import get_db
from app.schemas.auth import (
    StaffLogin, StaffResponse, StaffLoginResponse,
    CustomerLogin, CustomerResponse, CustomerLoginResponse
)
from app.services.staff_service import StaffService
from app.services.customer_service import CustomerService
from app.services.activity_logger import ActivityLogger
from app.auth.auth_handler import (
    auth_handler, get_current_staff, get_current_customer, STAFF_COOKIE, CUSTOMER_COOKIE
)
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

def _set_session_cookie(response: Response, name: str, token: str, max_age: int) -> None:
    response.set_cookie(
        key=name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax"
    )

@router.post("/admin/login", response_model=StaffLoginResponse)
@limiter.limit("10/minute")  # Prevent brute force attacks
async def staff_login(
    request: Request,
    response: Response,
    login_data: StaffLogin,
    db: Session = Depends(get_db)
):
    """Authenticate a staff member and set the admin session cookie"""
    try:
        staff_service = StaffService(db)
        staff = staff_service.authenticate(login_data)

        if not staff:
            activity_logger = ActivityLogger(db)
            await activity_logger.log_request(
                request, 401, actor=login_data.email, error_message="Failed staff login attempt"
            )
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        token = auth_handler.create_staff_token(staff)
        expires_in = config.STAFF_TOKEN_EXPIRE_HOURS * 3600
        _set_session_cookie(response, STAFF_COOKIE, token, expires_in)

        return StaffLoginResponse(
            access_token=token,
            expires_in=expires_in,
            user=StaffResponse.model_validate(staff)
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Staff login failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.get("/admin/me", response_model=StaffResponse)
@limiter.limit("60/minute")
async def get_current_staff_info(
    request: Request,
    current_user: dict = Depends(get_current_staff),
    db: Session = Depends(get_db)
):
    """Get the signed-in staff member"""
    staff = StaffService(db).get_by_id(current_user["user_id"])
    if not staff or not staff.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return staff

@router.post("/customer/login", response_model=CustomerLoginResponse)
@limiter.limit("20/minute")
async def customer_login(
    request: Request,
    response: Response,
    login_data: CustomerLogin,
    db: Session = Depends(get_db)
):
    """Identify a customer by phone, creating the record on first visit"""
    try:
        customer = CustomerService(db).find_or_create(login_data.name, login_data.phone)
        table_number = login_data.table_number or "takeaway"

        token = auth_handler.create_customer_token(customer, table_number)
        expires_in = config.CUSTOMER_TOKEN_EXPIRE_HOURS * 3600
        _set_session_cookie(response, CUSTOMER_COOKIE, token, expires_in)

        return CustomerLoginResponse(
            access_token=token,
            expires_in=expires_in,
            customer=CustomerResponse(
                id=customer.id,
                name=customer.name,
                phone=customer.phone,
                table_number=table_number
            )
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Customer login error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.get("/customer/me", response_model=CustomerResponse)
@limiter.limit("60/minute")
async def get_current_customer_info(
    request: Request,
    customer: dict = Depends(get_current_customer)
):
    """Get the signed-in customer from the session token"""
    return CustomerResponse(
        id=customer["customer_id"],
        name=customer["name"],
        phone=customer["phone"],
        table_number=customer["table_number"]
    )

@router.post("/logout")
@limiter.limit("30/minute")
async def logout(request: Request, response: Response):
    """Clear staff and customer session cookies"""
    response.delete_cookie(STAFF_COOKIE)
    response.delete_cookie(CUSTOMER_COOKIE)
    return {"message": "Logged out successfully"}
