"""
Error types and response formatting for the ordering API
"""

import uuid
import traceback
import logging
from typing import Optional
from datetime import datetime
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class ErrorContext:
    """Context object for tracking error information across the request lifecycle"""

    def __init__(self, request: Request):
        self.request_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.user_agent = request.headers.get("user-agent")
        self.timestamp = datetime.utcnow()

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None

class DatabaseError(Exception):
    """Custom exception for database-related errors"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

class OrderingError(Exception):
    """Base class for business-rule failures with a stable machine-readable code"""
    status_code = 400
    error_code = "ORDERING_ERROR"
    public_message = "The request could not be processed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.public_message
        super().__init__(self.message)

class InvalidTransition(OrderingError):
    """Requested status is not reachable from the order's current status"""
    status_code = 409
    error_code = "INVALID_TRANSITION"
    public_message = "The requested status change is not allowed."

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(f"Cannot transition order from {current_status} to {requested_status}")

class OrderNotFound(OrderingError):
    status_code = 404
    error_code = "ORDER_NOT_FOUND"
    public_message = "Order not found"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Order not found: {reference}")

class MalformedCallback(OrderingError):
    """A payment callback is missing required fields"""
    status_code = 400
    error_code = "MALFORMED_CALLBACK"
    public_message = "Missing required callback parameters"

    def __init__(self, missing_fields: list):
        self.missing_fields = missing_fields
        super().__init__(f"Missing required callback parameters: {', '.join(missing_fields)}")

class InvalidSignature(OrderingError):
    """A payment callback failed signature verification"""
    status_code = 401
    error_code = "INVALID_SIGNATURE"
    public_message = "Invalid payment verification"

class MenuItemUnavailable(OrderingError):
    status_code = 400
    error_code = "MENU_ITEM_UNAVAILABLE"

    def __init__(self, menu_item_id: str):
        self.menu_item_id = menu_item_id
        super().__init__(f"Item {menu_item_id} is not available")

class PaymentConfigurationError(OrderingError):
    status_code = 500
    error_code = "PAYMENT_NOT_CONFIGURED"
    public_message = "Payment gateway is not configured"

class NotificationDeliveryFailure(Exception):
    """SMS could not be delivered. Callers log it and carry on."""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def create_error_response(
        error_context: ErrorContext,
        error: Exception,
        status_code: int = 500,
        error_code: Optional[str] = None,
        include_details: bool = False
    ) -> JSONResponse:
        """Create a standardized error response"""

        error_data = {
            "error": {
                "code": error_code or ErrorHandler._get_error_code(error),
                "message": ErrorHandler._get_user_friendly_message(error),
                "request_id": error_context.request_id,
                "timestamp": error_context.timestamp.isoformat(),
                "endpoint": error_context.endpoint,
                "method": error_context.method
            }
        }

        # Include detailed error information in development
        if include_details:
            error_data["error"]["details"] = {
                "original_error": str(error),
                "error_type": type(error).__name__,
                "stack_trace": traceback.format_exc()
            }

        ErrorHandler._log_error(error_context, error, status_code)

        return JSONResponse(
            status_code=status_code,
            content=error_data
        )

    @staticmethod
    def _get_error_code(error: Exception) -> str:
        """Generate appropriate error codes based on exception type"""
        if isinstance(error, OrderingError):
            return error.error_code
        elif isinstance(error, HTTPException):
            return f"HTTP_{error.status_code}"
        elif isinstance(error, DatabaseError):
            return "DATABASE_ERROR"
        elif isinstance(error, ValueError):
            return "VALIDATION_ERROR"
        else:
            return "INTERNAL_ERROR"

    @staticmethod
    def _get_user_friendly_message(error: Exception) -> str:
        """Generate user-friendly error messages"""
        if isinstance(error, (InvalidTransition, OrderNotFound, MenuItemUnavailable)):
            return error.message
        elif isinstance(error, OrderingError):
            return error.public_message
        elif isinstance(error, HTTPException):
            return error.detail
        elif isinstance(error, DatabaseError):
            return "A database error occurred. Please try again later."
        elif isinstance(error, ValueError):
            return "Invalid input provided. Please check your data and try again."
        else:
            return "An unexpected error occurred. Please try again later."

    @staticmethod
    def _log_error(error_context: ErrorContext, error: Exception, status_code: int):
        """Log error with comprehensive context"""
        extra = {
            "request_id": error_context.request_id,
            "endpoint": error_context.endpoint,
            "method": error_context.method,
            "status_code": status_code,
            "client_ip": error_context.client_ip,
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        message = f"Error {error_context.request_id}: {type(error).__name__} in {error_context.method} {error_context.endpoint}: {error}"
        if isinstance(error, InvalidSignature):
            # possible spoofing attempt
            logger.warning(message, extra=extra)
        elif status_code < 500:
            logger.info(message, extra=extra)
        else:
            extra["stack_trace"] = traceback.format_exc()
            logger.error(message, extra=extra)

async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    """FastAPI exception handler for business-rule failures"""
    return ErrorHandler.create_error_response(
        ErrorContext(request), exc, status_code=exc.status_code
    )
