"""
Signup payload validation.

Turns an untyped, already-decoded JSON value into a SignupRequest or raises
ValidationFailed. Checks run in a fixed order so a payload with several
problems always reports the same one.
"""

import re
from dataclasses import dataclass
from typing import Any

from .exceptions import ValidationErrorKind, ValidationFailed
from .models import SignupRequest

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class FieldLimits:
    """Maximum lengths of free-text signup fields."""

    full_name: int = 50
    email: int = 200
    brand_name: int = 70


def _clean(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def validate_signup(raw: Any, limits: FieldLimits = FieldLimits()) -> SignupRequest:
    """
    Validate and normalize a signup payload.

    Args:
        raw: Decoded JSON body
        limits: Per-deployment field length limits

    Returns:
        SignupRequest with trimmed fields and a lowercased email

    Raises:
        ValidationFailed: With the first failing check's kind
    """
    if not isinstance(raw, dict):
        raise ValidationFailed(ValidationErrorKind.INVALID_BODY)

    full_name = _clean(raw, "full_name")
    email = _clean(raw, "email")
    brand_name = _clean(raw, "brand_name")
    ref = _clean(raw, "ref")

    if not full_name:
        raise ValidationFailed(ValidationErrorKind.FULL_NAME_REQUIRED)
    if not email:
        raise ValidationFailed(ValidationErrorKind.EMAIL_REQUIRED)

    if len(full_name) > limits.full_name:
        raise ValidationFailed(ValidationErrorKind.FULL_NAME_TOO_LONG)
    if len(email) > limits.email:
        raise ValidationFailed(ValidationErrorKind.EMAIL_TOO_LONG)
    if brand_name and len(brand_name) > limits.brand_name:
        raise ValidationFailed(ValidationErrorKind.BRAND_NAME_TOO_LONG)

    if not EMAIL_PATTERN.match(email):
        raise ValidationFailed(ValidationErrorKind.INVALID_EMAIL_FORMAT)

    return SignupRequest(
        full_name=full_name,
        email=email.lower(),
        brand_name=brand_name,
        ref=ref,
    )
