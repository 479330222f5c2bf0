from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.core.exceptions import NotFoundError, ValidationError
from src.payroll_system.payroll_system.employees.memory_employee_repository import InMemoryEmployeeRepository
from src.payroll_system.payroll_system.employees.service import EmployeeService


@pytest.fixture
def service() -> EmployeeService:
    return EmployeeService(InMemoryEmployeeRepository())


def test_create_employee_with_profile(service):
    employee = service.create_employee(
        {
            "fullname": "  Pham Thi D ",
            "salary": "15000000",
            "dependents": 2,
            "probation": "yes",
            "nationality": "Vietnamese",
            "allowances": {"food": 730000, "houseRent": 2000000},
            "jobTitle": "Analyst",
        },
        now=datetime(2024, 1, 2, 9, 0),
    )

    assert employee.employee_id == 1
    assert employee.fullname == "Pham Thi D"
    assert employee.salary == Decimal("15000000")
    assert employee.probation is True
    assert employee.is_vietnamese
    assert employee.allowances.house_rent == Decimal("2000000")
    assert employee.allowances.total == Decimal("2730000")
    assert employee.job_title == "Analyst"
    assert employee.to_dict()["probation"] == "yes"


@pytest.mark.parametrize(
    "data",
    [
        {"salary": 1000},
        {"fullname": "A", "salary": -1},
        {"fullname": "A", "dependents": -2},
        {"fullname": "A", "probation": "maybe"},
        {"fullname": "A", "salary": "NaN"},
        {"fullname": "A", "salary": "Infinity"},
        {"fullname": "A", "allowances": {"food": -5}},
    ],
)
def test_create_employee_rejects_invalid_input(service, data):
    with pytest.raises(ValidationError):
        service.create_employee(data)


def test_partial_update_keeps_other_fields(service):
    employee = service.create_employee(
        {"fullname": "A", "salary": 10_000_000, "dependents": 1, "allowances": {"phone": 200000}}
    )

    updated = service.update_employee(employee.employee_id, {"salary": 12_000_000, "allowances": {"fuel": 300000}})

    assert updated.salary == Decimal("12000000")
    assert updated.dependents == 1
    assert updated.allowances.phone == Decimal("200000")
    assert updated.allowances.fuel == Decimal("300000")
    assert updated.updated_at is not None
    assert service.get_employee(employee.employee_id) == updated


def test_missing_employee(service):
    with pytest.raises(NotFoundError):
        service.get_employee(5)
    with pytest.raises(NotFoundError):
        service.update_employee(5, {"salary": 1})
    with pytest.raises(NotFoundError):
        service.delete_employee(5)


def test_delete_employee(service):
    employee = service.create_employee({"fullname": "A"})

    service.delete_employee(employee.employee_id)

    assert service.list_employees() == []


def test_invalid_salary_on_update(service):
    employee = service.create_employee({"fullname": "A", "salary": 1000})

    with pytest.raises(ValidationError):
        service.update_employee(employee.employee_id, {"salary": "NaN"})

    assert service.get_employee(employee.employee_id).salary == Decimal("1000")
