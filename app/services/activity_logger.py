"""
Activity logging service
Audit trail for staff status changes, payment callbacks and server errors
"""

from sqlalchemy.orm import Session
from fastapi import Request
from app.models.activity_log import ActivityLog
from typing import Optional
import logging

logger = logging.getLogger(__name__)

class ActivityLogger:
    """Service for logging audited activities"""

    def __init__(self, db: Session):
        self.db = db

    async def log_activity(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        actor: Optional[str] = None,
        order_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Persist an activity row; failures are logged and never raised"""
        try:
            activity_log = ActivityLog(
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                actor=actor,
                order_id=order_id,
                ip_address=ip_address,
                user_agent=user_agent,
                error_message=error_message
            )

            self.db.add(activity_log)
            self.db.commit()
            self.db.refresh(activity_log)

            return activity_log

        except Exception as e:
            logger.error(f"Failed to log activity: {e}")
            self.db.rollback()
            return None

    async def log_request(
        self,
        request: Request,
        status_code: int,
        actor: Optional[str] = None,
        order_id: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Convenience wrapper pulling endpoint, client and agent from the request"""
        return await self.log_activity(
            endpoint=str(request.url.path),
            method=request.method,
            status_code=status_code,
            actor=actor,
            order_id=order_id,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            error_message=error_message
        )

