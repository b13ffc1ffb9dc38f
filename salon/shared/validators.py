"""Shared validation utilities"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from ..exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

CENTS = Decimal("0.01")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValidationError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"Invalid email format: {email}")

    return email


def to_money(value, field: str = "amount") -> Decimal:
    """Convert a number to a cent-rounded Decimal, rejecting NaN and infinities"""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field} must be a number") from e
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_positive_money(value, field: str = "amount") -> Decimal:
    amount = to_money(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return amount


def validate_percentage(value) -> Decimal:
    """Commission percentage within [0, 100], rounded half-up to the stored 2 decimals"""
    if isinstance(value, bool) or value is None:
        raise ValidationError("commissionPercentage must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError("commissionPercentage must be a finite number")
    try:
        percentage = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError("commissionPercentage must be a number") from e
    if not percentage.is_finite() or percentage < 0 or percentage > 100:
        raise ValidationError("commissionPercentage must be between 0 and 100")
    return percentage.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_commission(amount: Decimal, percentage: Decimal) -> Decimal:
    """round(amount * percentage / 100) to cents, half-up"""
    return (amount * percentage / Decimal(100)).quantize(CENTS, rounding=ROUND_HALF_UP)
