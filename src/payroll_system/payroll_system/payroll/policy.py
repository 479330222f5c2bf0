from __future__ import annotations

from dataclasses import dataclass, fields, replace
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..common.numbers import to_decimal
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class TaxBracket:
    """Marginal bracket: ``rate`` applies to the part of income in [lower, upper)."""

    lower: Decimal
    upper: Optional[Decimal]
    rate: Decimal

    def portion(self, income: Decimal) -> Decimal:
        if income <= self.lower:
            return Decimal("0")
        top = income if self.upper is None else min(income, self.upper)
        return top - self.lower


def _bracket(lower: int, upper: Optional[int], rate: str) -> TaxBracket:
    return TaxBracket(
        lower=Decimal(lower),
        upper=Decimal(upper) if upper is not None else None,
        rate=Decimal(rate),
    )


DEFAULT_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    _bracket(0, 5_000_000, "0.05"),
    _bracket(5_000_000, 10_000_000, "0.10"),
    _bracket(10_000_000, 18_000_000, "0.15"),
    _bracket(18_000_000, 32_000_000, "0.20"),
    _bracket(32_000_000, 52_000_000, "0.25"),
    _bracket(52_000_000, 80_000_000, "0.30"),
    _bracket(80_000_000, None, "0.35"),
)


@dataclass(frozen=True)
class PayrollPolicy:
    """Jurisdictional constants for the payroll calculator.

    Defaults are the Vietnamese personal income tax and statutory insurance
    rules. Caps are ``base * multiplier``: the health and social caps use the
    base salary, the accident/unemployment cap the regional minimum wage.
    """

    base_salary: Decimal = Decimal("2340000")
    regional_minimum_wage: Decimal = Decimal("4960000")
    insurance_cap_multiplier: Decimal = Decimal("20")

    health_insurance_rate: Decimal = Decimal("0.015")
    social_insurance_rate: Decimal = Decimal("0.08")
    accident_insurance_rate: Decimal = Decimal("0.01")

    personal_relief: Decimal = Decimal("11000000")
    dependent_relief: Decimal = Decimal("4400000")

    food_exemption: Decimal = Decimal("730000")
    clothes_exemption_per_year: Decimal = Decimal("5000000")

    overtime_soon_multiplier: Decimal = Decimal("1.5")
    overtime_late_multiplier: Decimal = Decimal("1.8")
    probation_rate: Decimal = Decimal("0.85")
    hours_per_day: Decimal = Decimal("8")

    tax_brackets: tuple[TaxBracket, ...] = DEFAULT_TAX_BRACKETS

    @property
    def health_insurance_cap(self) -> Decimal:
        return self.base_salary * self.insurance_cap_multiplier

    @property
    def social_insurance_cap(self) -> Decimal:
        return self.base_salary * self.insurance_cap_multiplier

    @property
    def accident_insurance_cap(self) -> Decimal:
        return self.regional_minimum_wage * self.insurance_cap_multiplier

    @property
    def clothes_exemption(self) -> Decimal:
        """Monthly share of the yearly clothing exemption."""
        return self.clothes_exemption_per_year / 12

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]] = None) -> "PayrollPolicy":
        """Build a policy from the PAYROLL_POLICY setting; unknown keys are rejected."""
        policy = cls()
        if not overrides:
            return policy

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValidationError(f"Unknown payroll policy keys: {', '.join(unknown)}")

        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key == "tax_brackets":
                changes[key] = parse_tax_brackets(value)
            else:
                changes[key] = to_decimal(value, field_name=key)
        return replace(policy, **changes)


def parse_tax_brackets(value: Sequence[Any]) -> tuple[TaxBracket, ...]:
    """Accept ``[lower, upper, rate]`` triples or ``{"lower", "upper", "rate"}`` dicts."""
    brackets = []
    for item in value or ():
        if isinstance(item, Mapping):
            lower, upper, rate = item.get("lower"), item.get("upper"), item.get("rate")
        else:
            try:
                lower, upper, rate = item
            except (TypeError, ValueError):
                raise ValidationError("tax bracket must be [lower, upper, rate]")
        brackets.append(
            TaxBracket(
                lower=to_decimal(lower, field_name="lower"),
                upper=None if upper is None else to_decimal(upper, field_name="upper"),
                rate=to_decimal(rate, field_name="rate"),
            )
        )

    if not brackets:
        raise ValidationError("tax_brackets must not be empty")
    brackets.sort(key=lambda b: b.lower)
    return tuple(brackets)
