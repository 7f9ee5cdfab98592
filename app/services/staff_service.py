"""
Staff account service
Handles staff authentication and account seeding
"""

from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime
from typing import Optional
import logging

from app.models.staff_user import StaffUser
from app.schemas.auth import StaffCreate, StaffLogin
from app.auth.auth_handler import AuthHandler
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

class StaffService:
    """Service for staff account operations"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    def create_staff(self, staff_data: StaffCreate) -> StaffUser:
        """Create a new staff account"""
        try:
            existing = self.db.query(StaffUser).filter(StaffUser.email == staff_data.email.lower()).first()
            if existing:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Email already registered"
                )

            staff = StaffUser(
                email=staff_data.email.lower(),
                password_hash=self.auth_handler.get_password_hash(staff_data.password),
                full_name=staff_data.full_name,
                role=staff_data.role,
                is_active=True
            )

            self.db.add(staff)
            self.db.commit()
            self.db.refresh(staff)

            logger.info(f"Created staff account: {staff.email} ({staff.role})")
            return staff

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create staff account: {e}")
            raise DatabaseError(f"Failed to create staff account: {str(e)}", e)

    def authenticate(self, login_data: StaffLogin) -> Optional[StaffUser]:
        """Authenticate staff credentials"""
        try:
            staff = self.db.query(StaffUser).filter(StaffUser.email == login_data.email.lower()).first()

            if not staff:
                logger.warning(f"Login attempt with unknown staff email: {login_data.email}")
                return None

            if not staff.is_active:
                logger.warning(f"Login attempt with inactive staff account: {staff.email}")
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Account is deactivated"
                )

            if not self.auth_handler.verify_password(login_data.password, staff.password_hash):
                logger.warning(f"Failed login attempt for staff: {staff.email}")
                return None

            staff.last_login = datetime.utcnow()
            self.db.commit()

            logger.info(f"Successful staff login: {staff.email}")
            return staff

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Authentication error: {e}")
            raise DatabaseError(f"Authentication failed: {str(e)}", e)

    def get_by_id(self, staff_id: str) -> Optional[StaffUser]:
        return self.db.query(StaffUser).filter(StaffUser.id == staff_id).first()
