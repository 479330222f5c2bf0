from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.exceptions import ValidationError

ZERO = Decimal("0")


def to_decimal(value: Any, *, field_name: str = "value") -> Decimal:
    """Coerce a JSON/DB number into Decimal; missing values become 0.

    Floats go through ``str`` so 0.1 stays 0.1 instead of its binary expansion.
    NaN and infinities are rejected.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a finite number")
    return amount


def as_float(value: Decimal) -> float:
    """Decimal -> float for JSON payloads."""
    return float(value)
