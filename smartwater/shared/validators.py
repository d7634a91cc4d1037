"""Shared validation utilities"""

import re
from typing import Iterable, Optional


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize US phone number to E.164 format.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number in E.164 format (+1XXXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    # Handle +1 prefix
    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase, stripped email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_decimal_string(value: Optional[str], field: str = "Value") -> Optional[str]:
    """Validate a non-negative decimal stored as text (quantities, percentages)"""
    if value is None:
        return value

    value = str(value).strip()
    try:
        number = float(value)
    except ValueError as e:
        raise ValueError(f"{field} must be a number") from e

    if number < 0:
        raise ValueError(f"{field} cannot be negative")
    return value


def validate_choice(value: Optional[str], choices: Iterable[str], field: str = "Value") -> Optional[str]:
    if value is None:
        return value
    choices = tuple(choices)
    if value not in choices:
        raise ValueError(f"{field} must be one of: {', '.join(choices)}")
    return value


def slugify(name: str) -> str:
    """Lowercase, spaces become hyphens, anything else non-alphanumeric is dropped"""
    slug = re.sub(r"\s+", "-", name.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug or "organization"
