from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from ...common.datetime_utils import now_local
from ...common.numbers import ZERO
from ..model import SalaryCalculation, SalaryInput
from ..policy import PayrollPolicy
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Gross-to-net with prorated salary, statutory insurance and progressive tax.

    Insurance is based on the contractual gross (not the prorated salary);
    tax applies to the prorated salary minus insurance and relief, plus the
    taxable part of allowances, overtime pay and bonus.
    """

    def __init__(self, policy: Optional[PayrollPolicy] = None):
        self._policy = policy or PayrollPolicy()

    @property
    def policy(self) -> PayrollPolicy:
        return self._policy

    def tax_by_bracket(self, taxable_income: Decimal) -> tuple[Decimal, ...]:
        return tuple(b.portion(taxable_income) * b.rate for b in self._policy.tax_brackets)

    def calculate(self, inputs: SalaryInput, *, now: Optional[datetime] = None) -> SalaryCalculation:
        p = self._policy
        gross = inputs.gross_salary
        working_days = inputs.working_days
        days_off = inputs.days_off
        a = inputs.allowances

        effective_gross = gross * p.probation_rate if inputs.is_probation else gross

        if working_days > 0:
            hourly_rate = effective_gross / (working_days * p.hours_per_day)
            adjusted_salary = effective_gross / working_days * (working_days - days_off)
        else:
            hourly_rate = ZERO
            adjusted_salary = ZERO

        overtime_soon_pay = inputs.overtime_soon_hours * p.overtime_soon_multiplier * hourly_rate
        overtime_late_pay = inputs.overtime_late_hours * p.overtime_late_multiplier * hourly_rate
        total_overtime = overtime_soon_pay + overtime_late_pay

        health = min(gross, p.health_insurance_cap) * p.health_insurance_rate
        social = min(gross, p.social_insurance_cap) * p.social_insurance_rate
        accident = min(gross, p.accident_insurance_cap) * p.accident_insurance_rate if inputs.is_vietnamese else ZERO
        total_insurance = health + social + accident

        personal_relief = p.personal_relief + p.dependent_relief * inputs.dependents

        taxable = (
            adjusted_salary
            - total_insurance
            - personal_relief
            + a.parking
            + a.fuel
            + a.house_rent
            + a.phone
            + max(a.food - p.food_exemption, ZERO)
            + max(a.clothes - p.clothes_exemption, ZERO)
            + total_overtime
            + inputs.bonus
        )
        taxable_income = max(taxable, ZERO)

        brackets = self.tax_by_bracket(taxable_income)
        total_tax = sum(brackets, ZERO)

        net_salary = (
            adjusted_salary
            + a.food
            + a.clothes
            - total_tax
            - total_insurance
            + a.parking
            + a.fuel
            + a.house_rent
            + a.phone
            + total_overtime
            + inputs.bonus
        )

        return SalaryCalculation(
            fullname=inputs.fullname,
            gross_salary=gross,
            effective_gross=effective_gross,
            working_days=working_days,
            days_off=days_off,
            work_days=working_days - days_off,
            hourly_rate=hourly_rate,
            adjusted_salary=adjusted_salary,
            overtime_soon_hours=inputs.overtime_soon_hours,
            overtime_late_hours=inputs.overtime_late_hours,
            overtime_soon_pay=overtime_soon_pay,
            overtime_late_pay=overtime_late_pay,
            total_overtime=total_overtime,
            food=a.food,
            clothes=a.clothes,
            parking=a.parking,
            fuel=a.fuel,
            house_rent=a.house_rent,
            phone=a.phone,
            total_benefits=a.total,
            health_insurance=health,
            social_insurance=social,
            accident_insurance=accident,
            total_insurance=total_insurance,
            personal_relief=personal_relief,
            taxable_income=taxable_income,
            tax_by_bracket=brackets,
            total_tax=total_tax,
            bonus=inputs.bonus,
            net_salary=net_salary,
            dependents=inputs.dependents,
            is_probation=inputs.is_probation,
            is_vietnamese=inputs.is_vietnamese,
            calculated_at=now or now_local(),
        )
