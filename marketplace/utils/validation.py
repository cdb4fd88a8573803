"""
Form validation rules shared by request schemas.

Each validator returns the cleaned value or raises ValueError with the
message shown to the user.
"""
from __future__ import annotations

import re

from marketplace.utils.formatting import digits_only

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
BANK_ACCOUNT_PATTERN = re.compile(r"^[0-9-]+$")

PRODUCT_CATEGORIES = ("과일", "채소", "엽채류", "근채류", "수산물", "축산물", "기타")
DELIVERY_METHODS = ("courier", "direct", "dawn")


def validate_business_name(value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError("상호명을 입력해주세요.")
    if len(cleaned) > 100:
        raise ValueError("상호명은 100자 이하로 입력해주세요.")
    return cleaned


def validate_phone(value: str) -> str:
    digits = digits_only(value)
    if not 9 <= len(digits) <= 11 or not digits.startswith("0"):
        raise ValueError("올바른 전화번호 형식이 아닙니다.")
    return value.strip()


def validate_business_number(value: str) -> str:
    digits = digits_only(value)
    if len(digits) != 10:
        raise ValueError("사업자등록번호는 10자리 숫자입니다.")
    return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"


def validate_bank_account_number(value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned or not BANK_ACCOUNT_PATTERN.match(cleaned):
        raise ValueError("계좌번호는 숫자와 하이픈(-)만 입력할 수 있습니다.")
    return cleaned


def validate_email(value: str) -> str:
    cleaned = (value or "").strip().lower()
    if not EMAIL_PATTERN.match(cleaned):
        raise ValueError("올바른 이메일 형식이 아닙니다.")
    return cleaned


def validate_category(value: str) -> str:
    if value not in PRODUCT_CATEGORIES:
        raise ValueError(f"카테고리는 {', '.join(PRODUCT_CATEGORIES)} 중 하나여야 합니다.")
    return value


def validate_delivery_method(value: str) -> str:
    if value not in DELIVERY_METHODS:
        raise ValueError("배송 방법이 올바르지 않습니다.")
    return value
