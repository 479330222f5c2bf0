from __future__ import annotations

from datetime import MAXYEAR
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.common.numbers import to_decimal
from src.payroll_system.payroll_system.common.validators import parse_bool, require_year
from src.payroll_system.payroll_system.core.exceptions import ValidationError


@pytest.mark.parametrize("value", ["NaN", "nan", "Infinity", "-Infinity", float("nan"), float("inf"), Decimal("NaN")])
def test_to_decimal_rejects_non_finite_numbers(value):
    with pytest.raises(ValidationError):
        to_decimal(value, field_name="bonus")


def test_to_decimal_keeps_float_digits():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(None) == Decimal("0")


def test_require_year_bounds():
    assert require_year(MAXYEAR) == MAXYEAR
    for value in (0, MAXYEAR + 1, "10000"):
        with pytest.raises(ValidationError):
            require_year(value)


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), ("yes", True), ("ON", True), ("1", True), (None, False), ("no", False), ("off", False), ("", False)],
)
def test_parse_bool(value, expected):
    assert parse_bool(value, "probation") is expected


def test_parse_bool_rejects_unknown_words():
    with pytest.raises(ValidationError):
        parse_bool("maybe", "confirm_overwrite")
