from __future__ import annotations

from datetime import MAXYEAR
from decimal import Decimal
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .numbers import to_decimal


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_month(value: Any) -> int:
    month = require_int(value, "month")
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    return month


def require_year(value: Any) -> int:
    year = require_int(value, "year")
    if not 1 <= year <= MAXYEAR:
        raise ValidationError(f"year must be between 1 and {MAXYEAR}")
    return year


def require_non_negative(value: Any, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name=field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return amount


def require_non_negative_int(value: Any, field_name: str) -> int:
    if value is None or value == "":
        return 0
    number = require_int(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "off", ""})


def parse_bool(value: Any, field_name: str) -> bool:
    """Accept real booleans and the usual "yes"/"no" style strings; missing is False."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValidationError(f"{field_name} must be 'yes' or 'no'")
