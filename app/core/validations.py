import re
from typing import Optional

from app.core.exceptions import ValidationError

PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def clean_phone_number(phone: str) -> str:
    """
    Normalise a mobile number to its 10 digits.

    Spaces and dashes are tolerated; anything else that is not exactly ten
    digits is rejected.
    """
    if not phone or not phone.strip():
        raise ValidationError("Phone number is required", {"field": "phone"})

    clean_phone = re.sub(r"[\s-]", "", phone)

    if not PHONE_PATTERN.match(clean_phone):
        raise ValidationError(
            "Please enter a valid 10-digit phone number", {"field": "phone"}
        )

    return clean_phone


def clean_email(email: Optional[str]) -> Optional[str]:
    """Optional email: blank becomes None, otherwise it must look like an address"""
    if email is None or not email.strip():
        return None

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email address", {"field": "email"})
    return email


def require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field.replace('_', ' ').capitalize()} is required", {"field": field})
    return value.strip()
