"""
Application settings for DineEasy
Values come from the environment (a .env file is loaded by main.py)
"""

import os
from decimal import Decimal


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dineeasy.db")

# Authentication
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
STAFF_TOKEN_EXPIRE_HOURS = int(os.getenv("STAFF_TOKEN_EXPIRE_HOURS", "24"))
CUSTOMER_TOKEN_EXPIRE_HOURS = int(os.getenv("CUSTOMER_TOKEN_EXPIRE_HOURS", "4"))
COOKIE_SECURE = _get_bool("COOKIE_SECURE", False)

# Pricing
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.10"))

# PayHere
PAYHERE_MERCHANT_ID = os.getenv("PAYHERE_MERCHANT_ID", "")
PAYHERE_MERCHANT_SECRET = os.getenv("PAYHERE_MERCHANT_SECRET", "")
PAYHERE_SANDBOX = _get_bool("PAYHERE_SANDBOX", True)
PAYHERE_CURRENCY = os.getenv("PAYHERE_CURRENCY", "LKR")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

# SMS
SMS_PROVIDER = os.getenv("SMS_PROVIDER", "notify.lk")
SMS_API_URL = os.getenv("SMS_API_URL")
SMS_USER_ID = os.getenv("SMS_USER_ID", "")
SMS_API_KEY = os.getenv("SMS_API_KEY", "")
SMS_PASSWORD = os.getenv("SMS_PASSWORD", "")
SMS_SENDER_ID = os.getenv("SMS_SENDER_ID")
SMS_TIMEOUT_SECONDS = int(os.getenv("SMS_TIMEOUT_SECONDS", "10"))

# HTTP
RATE_LIMIT_ENABLED = _get_bool("RATE_LIMIT_ENABLED", True)
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
