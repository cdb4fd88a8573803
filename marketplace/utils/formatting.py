"""Display formatting for Korean phone numbers, prices and order numbers."""
from __future__ import annotations

import re
import secrets
from datetime import datetime, UTC
from typing import Optional

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: Optional[str]) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_phone(phone: str) -> str:
    """Return a hyphenated Korean phone number.

    Seoul numbers (02) become 02-XXX-XXXX or 02-XXXX-XXXX, 11-digit mobile
    numbers 3-4-4 and 10-digit numbers 3-3-4. Anything else is returned as
    given.
    """
    digits = digits_only(phone)
    if digits.startswith("02") and len(digits) in (9, 10):
        return f"02-{digits[2:-4]}-{digits[-4:]}"
    if len(digits) == 11:
        return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return phone


def format_price(amount: int) -> str:
    """12500 -> '12,500원'"""
    return f"{amount:,}원"


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Return an order number such as ORD-20250101-A1B2C3."""
    now = now or datetime.now(UTC)
    return f"ORD-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def format_anonymous_code(sequence: int) -> str:
    """VENDOR-001 style code; widens past 999 instead of wrapping."""
    return f"VENDOR-{sequence:03d}"
