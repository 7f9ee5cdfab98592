"""
Sri Lankan phone number helpers
"""

import re

def _digits(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")

def validate_sri_lankan_phone(phone: str) -> bool:
    """Accept 94XXXXXXXXX, 0XXXXXXXXX or a bare 9-digit subscriber number"""
    cleaned = _digits(phone)
    if cleaned.startswith("94") and len(cleaned) == 11:
        return True
    if cleaned.startswith("0") and len(cleaned) == 10:
        return True
    return len(cleaned) == 9

def format_phone_number(phone: str) -> str:
    """Normalise to +94XXXXXXXXX for storage"""
    cleaned = _digits(phone)
    if cleaned.startswith("94"):
        return f"+{cleaned}"
    if cleaned.startswith("0"):
        return f"+94{cleaned[1:]}"
    if len(cleaned) == 9:
        return f"+94{cleaned}"
    return phone

def to_msisdn(phone: str) -> str:
    """Digits-only 94XXXXXXXXX form expected by SMS gateways"""
    cleaned = _digits(phone)
    if cleaned.startswith("94"):
        return cleaned
    if cleaned.startswith("0"):
        return "94" + cleaned[1:]
    return "94" + cleaned
