"""Helpers for building JSON response dicts"""

from datetime import date, datetime, time
from typing import Optional, Union


def isoformat(value: Optional[Union[date, datetime, time]]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def mask_prefix(value: Optional[str], visible: int = 5) -> Optional[str]:
    """Show the first few characters of an identifier, e.g. 'AC123...'"""
    return f"{value[:visible]}..." if value else None


def mask_secret(value) -> Optional[str]:
    return "[MASKED]" if value else None
