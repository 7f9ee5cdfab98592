"""
Order endpoints: customer placement, staff listing and status updates
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
import logging
import math

from app.database import get_db
from app.dependencies import get_order_repository, get_order_service, get_lifecycle_manager
from app.repositories.order_repository import OrderRepository
from app.schemas.order import OrderCreate, OrderStatusUpdate, OrderResponse, OrderListResponse, OrderStatus
from app.services.activity_logger import ActivityLogger
from app.services.order_lifecycle import OrderLifecycleManager
from app.services.order_service import OrderService
from app.auth.auth_handler import get_current_customer, staff_required
from app.utils.error_handler import OrderingError, OrderNotFound
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=OrderResponse, status_code=201)
@limiter.limit("10/minute")
async def create_order(
    request: Request,
    order: OrderCreate,
    customer: dict = Depends(get_current_customer),
    order_service: OrderService = Depends(get_order_service)
):
    """Place a new order for the signed-in customer"""
    try:
        table_number = order.table_number or customer.get("table_number")
        return order_service.place_order(
            customer_id=customer["customer_id"],
            items=order.items,
            table_number=table_number,
            special_instructions=order.special_instructions
        )

    except (HTTPException, OrderingError):
        raise
    except Exception as e:
        logger.error(f"Failed to create order: {e}")
        raise HTTPException(status_code=500, detail="Failed to create order")

@router.get("/", response_model=OrderListResponse)
@limiter.limit("60/minute")
async def get_orders(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=200, description="Items per page"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    date_from: Optional[date] = Query(None, description="Created on or after (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Created on or before (YYYY-MM-DD)"),
    current_user: dict = Depends(staff_required),
    repository: OrderRepository = Depends(get_order_repository)
):
    """Paginated order list for the kitchen and admin dashboards.

    Without any filter only today's orders are returned.
    """
    try:
        if status is None and date_from is None and date_to is None:
            orders, total = repository.todays_orders(page=page, page_size=page_size)
        else:
            orders, total = repository.list_orders(
                status=status,
                date_from=date_from,
                date_to=date_to,
                page=page,
                page_size=page_size
            )

        return OrderListResponse(
            orders=orders,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size)
        )

    except Exception as e:
        logger.error(f"Failed to get orders: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve orders")

@router.get("/{order_id}", response_model=OrderResponse)
@limiter.limit("60/minute")
async def get_order(
    request: Request,
    order_id: str,
    current_user: dict = Depends(staff_required),
    repository: OrderRepository = Depends(get_order_repository)
):
    """Get a specific order by ID"""
    order = repository.find_by_id(order_id)
    if not order:
        raise OrderNotFound(order_id)
    return order

@router.patch("/{order_id}/status", response_model=OrderResponse)
@limiter.limit("30/minute")
async def update_order_status(
    request: Request,
    order_id: str,
    status_update: OrderStatusUpdate,
    current_user: dict = Depends(staff_required),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle_manager),
    db: Session = Depends(get_db)
):
    """Move an order along the fulfillment lifecycle"""
    activity_logger = ActivityLogger(db)
    try:
        order = lifecycle.transition(order_id, status_update.status)

    except OrderingError as e:
        await activity_logger.log_request(
            request, e.status_code, actor=current_user["email"], order_id=order_id, error_message=e.message
        )
        raise
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update status of order {order_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update order status")

    await activity_logger.log_request(request, 200, actor=current_user["email"], order_id=order_id)
    logger.info(f"{current_user['email']} set order {order_id} to {status_update.status}")
    return order
