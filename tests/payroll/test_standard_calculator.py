from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.core.exceptions import ValidationError
from src.payroll_system.payroll_system.employees.model import Allowances
from src.payroll_system.payroll_system.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.payroll_system.payroll_system.payroll.model import SalaryInput
from src.payroll_system.payroll_system.payroll.policy import PayrollPolicy


def _input(**overrides) -> SalaryInput:
    data = dict(
        fullname="Nguyen Van A",
        gross_salary=Decimal("20000000"),
        working_days=Decimal("22"),
        days_off=Decimal("0"),
        dependents=1,
        is_probation=False,
        is_vietnamese=True,
    )
    data.update(overrides)
    return SalaryInput(**data)


def test_vietnamese_employee_with_one_dependent():
    c = StandardPayrollCalculator().calculate(_input())

    assert c.health_insurance == Decimal("300000")
    assert c.social_insurance == Decimal("1600000")
    assert c.accident_insurance == Decimal("200000")
    assert c.total_insurance == Decimal("2100000")
    assert c.personal_relief == Decimal("15400000")
    assert c.taxable_income == Decimal("2500000")
    assert c.total_tax == Decimal("125000")
    assert c.tax_by_bracket[0] == Decimal("125000")
    assert all(t == 0 for t in c.tax_by_bracket[1:])
    assert c.net_salary == Decimal("17775000")
    assert c.work_days == Decimal("22")


def test_zero_working_days_gives_zero_rate_and_salary():
    c = StandardPayrollCalculator().calculate(_input(working_days=Decimal("0"), overtime_soon_hours=Decimal("5")))

    assert c.hourly_rate == 0
    assert c.adjusted_salary == 0
    assert c.total_overtime == 0


def test_probation_scales_effective_gross():
    calc = StandardPayrollCalculator()

    assert calc.calculate(_input()).effective_gross == Decimal("20000000")
    assert calc.calculate(_input(is_probation=True)).effective_gross == Decimal("17000000")


def test_insurance_is_based_on_contract_gross_even_on_probation():
    c = StandardPayrollCalculator().calculate(_input(is_probation=True))

    assert c.social_insurance == Decimal("1600000")


def test_foreign_employee_pays_no_accident_insurance():
    c = StandardPayrollCalculator().calculate(_input(is_vietnamese=False))

    assert c.accident_insurance == 0
    assert c.total_insurance == Decimal("1900000")


def test_insurance_bases_are_capped():
    c = StandardPayrollCalculator().calculate(_input(gross_salary=Decimal("100000000")))

    assert c.health_insurance == Decimal("702000")
    assert c.social_insurance == Decimal("3744000")
    assert c.accident_insurance == Decimal("992000")


def test_overtime_multipliers():
    # 17.6M over 22 days of 8h -> 100,000 per hour
    c = StandardPayrollCalculator().calculate(
        _input(
            gross_salary=Decimal("17600000"),
            overtime_soon_hours=Decimal("2"),
            overtime_late_hours=Decimal("1"),
        )
    )

    assert c.hourly_rate == Decimal("100000")
    assert c.overtime_soon_pay == Decimal("300000")
    assert c.overtime_late_pay == Decimal("180000")
    assert c.total_overtime == Decimal("480000")


def test_days_off_prorate_salary():
    c = StandardPayrollCalculator().calculate(
        _input(gross_salary=Decimal("22000000"), days_off=Decimal("1.5"))
    )

    assert c.adjusted_salary == Decimal("20500000")
    assert c.work_days == Decimal("20.5")


def test_only_food_and_clothes_above_exemption_are_taxed():
    calc = StandardPayrollCalculator()
    base = calc.calculate(_input(gross_salary=Decimal("30000000")))
    within = calc.calculate(
        _input(gross_salary=Decimal("30000000"), allowances=Allowances(food=Decimal("730000")))
    )
    above = calc.calculate(
        _input(gross_salary=Decimal("30000000"), allowances=Allowances(food=Decimal("1000000")))
    )

    assert within.taxable_income == base.taxable_income
    assert (above.taxable_income - base.taxable_income).quantize(Decimal("1")) == Decimal("270000")


def test_taxable_income_never_negative():
    c = StandardPayrollCalculator().calculate(_input(gross_salary=Decimal("5000000"), dependents=3))

    assert c.taxable_income == 0
    assert c.total_tax == 0


def test_net_salary_identity_without_overtime_or_bonus():
    allowances = Allowances(
        food=Decimal("1000000"),
        clothes=Decimal("500000"),
        parking=Decimal("100000"),
        fuel=Decimal("200000"),
        house_rent=Decimal("0"),
        phone=Decimal("50000"),
    )
    c = StandardPayrollCalculator().calculate(_input(gross_salary=Decimal("15000000"), allowances=allowances))

    expected = (
        c.adjusted_salary
        + c.food
        + c.clothes
        - c.total_tax
        - c.total_insurance
        + c.parking
        + c.fuel
        + c.house_rent
        + c.phone
    )
    assert c.net_salary == expected
    assert c.total_benefits == Decimal("1850000")


def test_bracket_integration_is_marginal():
    calc = StandardPayrollCalculator()

    # 5M*5% + 5M*10% + 8M*15% + 2M*20%
    assert sum(calc.tax_by_bracket(Decimal("20000000"))) == Decimal("2350000")


def test_tax_is_monotonic_in_taxable_income():
    calc = StandardPayrollCalculator()
    previous = Decimal("0")
    for income in range(0, 120_000_001, 1_250_000):
        tax = sum(calc.tax_by_bracket(Decimal(income)))
        assert tax >= previous
        previous = tax


def test_policy_overrides_change_relief():
    policy = PayrollPolicy.from_overrides({"personal_relief": 15_500_000, "dependent_relief": "6200000"})
    c = StandardPayrollCalculator(policy).calculate(_input())

    assert c.personal_relief == Decimal("21700000")


def test_policy_rejects_unknown_keys():
    with pytest.raises(ValidationError):
        PayrollPolicy.from_overrides({"vat_rate": 0.1})


def test_policy_accepts_custom_brackets():
    policy = PayrollPolicy.from_overrides({"tax_brackets": [[0, None, "0.1"]]})
    calc = StandardPayrollCalculator(policy)

    assert calc.tax_by_bracket(Decimal("1000000")) == (Decimal("100000.0"),)
