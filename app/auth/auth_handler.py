"""
Authentication and authorization handler for DineEasy
Staff and customer sessions are signed JWTs carried in cookies
(or an Authorization: Bearer header for API clients).
"""

from datetime import datetime, timedelta
from typing import Optional
from fastapi import HTTPException, Request, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from jose import JWTError, jwt

from app.config import SECRET_KEY, ALGORITHM, STAFF_TOKEN_EXPIRE_HOURS, CUSTOMER_TOKEN_EXPIRE_HOURS

STAFF_COOKIE = "admin-token"
CUSTOMER_COOKIE = "customer-token"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)
security = HTTPBearer(auto_error=False)

class AuthHandler:
    """Handles authentication and authorization"""

    def __init__(self):
        self.pwd_context = pwd_context

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.pwd_context.hash(password)

    def create_access_token(self, data: dict, expires_delta: timedelta) -> str:
        """Create a JWT access token"""
        to_encode = data.copy()
        now = datetime.utcnow()
        to_encode.update({"iat": now, "exp": now + expires_delta})
        return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

    def create_staff_token(self, staff) -> str:
        return self.create_access_token(
            {"sub": staff.id, "type": "staff", "email": staff.email, "full_name": staff.full_name, "role": staff.role},
            timedelta(hours=STAFF_TOKEN_EXPIRE_HOURS),
        )

    def create_customer_token(self, customer, table_number: Optional[str] = None) -> str:
        return self.create_access_token(
            {
                "sub": customer.id,
                "type": "customer",
                "name": customer.name,
                "phone": customer.phone,
                "table_number": table_number or "takeaway",
            },
            timedelta(hours=CUSTOMER_TOKEN_EXPIRE_HOURS),
        )

    def verify_token(self, token: str) -> dict:
        """Verify and decode a JWT token"""
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
            return payload
        except JWTError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

auth_handler = AuthHandler()

def _read_token(request: Request, cookie_name: str, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None

def _decode_session(token: Optional[str], expected_type: str, detail: str) -> dict:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
    payload = auth_handler.verify_token(token)
    if payload.get("type") != expected_type or payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload

def get_current_staff(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """Dependency to get the authenticated staff member"""
    payload = _decode_session(_read_token(request, STAFF_COOKIE, credentials), "staff", "Unauthorized")
    return {
        "user_id": payload["sub"],
        "email": payload.get("email"),
        "full_name": payload.get("full_name"),
        "role": payload.get("role", "kitchen"),
    }

def get_current_customer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """Dependency to get the authenticated customer"""
    payload = _decode_session(_read_token(request, CUSTOMER_COOKIE, credentials), "customer", "Customer not authenticated")
    return {
        "customer_id": payload["sub"],
        "name": payload.get("name"),
        "phone": payload.get("phone"),
        "table_number": payload.get("table_number", "takeaway"),
    }

# Role-based access control
class RoleChecker:
    """Check staff roles for authorization"""

    def __init__(self, allowed_roles: list):
        self.allowed_roles = allowed_roles

    def __call__(self, user: dict = Depends(get_current_staff)):
        if user.get("role") not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Operation not permitted"
            )
        return user

# Common role checkers
staff_required = RoleChecker(["admin", "manager", "kitchen"])
