"""
PayHere payment endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.dependencies import get_payment_service
from app.schemas.payment import PaymentStartRequest, PaymentStartResponse, PaymentCallbackResponse
from app.services.activity_logger import ActivityLogger
from app.services.payment_service import PaymentService
from app.auth.auth_handler import get_current_customer
from app.utils.error_handler import OrderingError, MalformedCallback
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/payhere/start", response_model=PaymentStartResponse)
@limiter.limit("10/minute")
async def start_payhere_payment(
    request: Request,
    payment_request: PaymentStartRequest,
    customer: dict = Depends(get_current_customer),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """Create a payment record and return the signed PayHere checkout payload"""
    try:
        return payment_service.start_payment(customer, payment_request.order_id)

    except (HTTPException, OrderingError):
        raise
    except Exception as e:
        logger.error(f"PayHere start failed for order {payment_request.order_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process payment request")

async def _read_callback_payload(request: Request) -> dict:
    """PayHere posts form-encoded data; JSON is accepted for manual replays"""
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            body = await request.json()
            if not isinstance(body, dict):
                raise MalformedCallback(["body"])
            return body
        form = await request.form()
        return {key: value for key, value in form.items()}
    except OrderingError:
        raise
    except Exception as e:
        logger.warning(f"Unreadable PayHere callback body: {e}")
        raise MalformedCallback(["body"])

@router.post("/payhere/callback", response_model=PaymentCallbackResponse, response_model_exclude_none=True)
@limiter.limit("120/minute")
async def payhere_callback(
    request: Request,
    payment_service: PaymentService = Depends(get_payment_service),
    db: Session = Depends(get_db)
):
    """PayHere notify_url endpoint; trust comes only from the md5sig check"""
    activity_logger = ActivityLogger(db)
    payload = {}
    try:
        payload = await _read_callback_payload(request)
        logger.info(
            f"PayHere callback received: order_id={payload.get('order_id')} status_code={payload.get('status_code')}"
        )
        result = payment_service.handle_callback(payload)

    except OrderingError as e:
        await activity_logger.log_request(
            request, e.status_code, actor="payhere", order_id=str(payload.get("order_id") or "")[:36] or None,
            error_message=e.message
        )
        raise
    except Exception as e:
        logger.error(f"PayHere callback processing error: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": {"code": "CALLBACK_PROCESSING_FAILED", "message": "Failed to process payment callback"}}
        )

    await activity_logger.log_request(request, 200, actor="payhere", order_id=str(payload.get("order_id"))[:36])
    return result
