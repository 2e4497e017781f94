"""Value checks used by the models' @validates hooks."""
from decimal import Decimal
from typing import Optional, Union

from pydantic import EmailStr, TypeAdapter, ValidationError

email_adapter = TypeAdapter(EmailStr)

Number = Union[int, float, Decimal]


def check_length(key: str, value: Optional[str], min_len: int, max_len: int) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not min_len <= len(value) <= max_len:
        raise ValueError(f"{key} must be between {min_len} and {max_len} characters")
    return value


def check_email(key: str, value: Optional[str]) -> Optional[str]:
    # Empty string is stored as NULL so the unique index ignores it.
    if value is None or not value.strip():
        return None
    try:
        value = email_adapter.validate_python(value.strip())
    except ValidationError:
        raise ValueError(f"{key} must be a valid email address") from None
    return value.lower()


def check_phone(key: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not 10 <= len(value) <= 15:
        raise ValueError(f"{key} must be between 10 and 15 characters")
    return value


def check_range(key: str, value: Optional[Number], low: Number, high: Number) -> Optional[Number]:
    if value is None:
        return None
    if not low <= value <= high:
        raise ValueError(f"{key} must be between {low} and {high}")
    return value


def check_non_negative(key: str, value: Optional[Number]) -> Optional[Number]:
    if value is None:
        return None
    if value < 0:
        raise ValueError(f"{key} must not be negative")
    return value
