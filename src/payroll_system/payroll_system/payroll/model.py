from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.numbers import ZERO, as_float
from ..core.enums import BatchErrorKind
from ..employees.model import Allowances, EmployeeProfile


@dataclass(frozen=True)
class SalaryInput:
    """Everything the calculator needs, in one canonical shape.

    Assembled by the payroll service from the employee profile, the
    attendance stats (or a manual override) and the request's common inputs.
    """

    fullname: str
    gross_salary: Decimal = ZERO
    working_days: Decimal = ZERO
    days_off: Decimal = ZERO
    dependents: int = 0
    allowances: Allowances = field(default_factory=Allowances)
    overtime_soon_hours: Decimal = ZERO
    overtime_late_hours: Decimal = ZERO
    bonus: Decimal = ZERO
    is_probation: bool = False
    is_vietnamese: bool = True

    @classmethod
    def from_profile(
        cls,
        employee: EmployeeProfile,
        *,
        working_days: Decimal,
        days_off: Decimal,
        overtime_soon_hours: Decimal = ZERO,
        overtime_late_hours: Decimal = ZERO,
        bonus: Decimal = ZERO,
    ) -> "SalaryInput":
        return cls(
            fullname=employee.fullname,
            gross_salary=employee.salary,
            working_days=working_days,
            days_off=days_off,
            dependents=employee.dependents,
            allowances=employee.allowances,
            overtime_soon_hours=overtime_soon_hours,
            overtime_late_hours=overtime_late_hours,
            bonus=bonus,
            is_probation=employee.probation,
            is_vietnamese=employee.is_vietnamese,
        )


@dataclass(frozen=True)
class SalaryCalculation:
    """Itemized result of one payroll calculation. Values are unrounded."""

    fullname: str
    gross_salary: Decimal
    effective_gross: Decimal
    working_days: Decimal
    days_off: Decimal
    work_days: Decimal
    hourly_rate: Decimal
    adjusted_salary: Decimal
    overtime_soon_hours: Decimal
    overtime_late_hours: Decimal
    overtime_soon_pay: Decimal
    overtime_late_pay: Decimal
    total_overtime: Decimal
    food: Decimal
    clothes: Decimal
    parking: Decimal
    fuel: Decimal
    house_rent: Decimal
    phone: Decimal
    total_benefits: Decimal
    health_insurance: Decimal
    social_insurance: Decimal
    accident_insurance: Decimal
    total_insurance: Decimal
    personal_relief: Decimal
    taxable_income: Decimal
    tax_by_bracket: tuple[Decimal, ...]
    total_tax: Decimal
    bonus: Decimal
    net_salary: Decimal
    dependents: int
    is_probation: bool
    is_vietnamese: bool
    calculated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Decimal):
                value = as_float(value)
            elif f.name == "tax_by_bracket":
                value = [as_float(v) for v in value]
            elif isinstance(value, datetime):
                value = value.isoformat()
            out[f.name] = value
        return out


@dataclass(frozen=True)
class SalaryRecord:
    """Stored payslip for one (employee_id, month, year)."""

    record_id: int
    employee_id: int
    month: int
    year: int
    calculation: SalaryCalculation
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[int, int, int]:
        return self.employee_id, self.month, self.year

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.record_id,
            "employee_id": self.employee_id,
            "month": self.month,
            "year": self.year,
        }
        data.update(self.calculation.to_dict())
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data


@dataclass(frozen=True)
class BatchError:
    employee_id: int
    message: str
    kind: BatchErrorKind
    record_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "employee_id": self.employee_id,
            "message": self.message,
            "kind": self.kind.value,
        }
        if self.record_id is not None:
            data["record_id"] = self.record_id
        return data


@dataclass(frozen=True)
class BatchResult:
    message: str
    results: Sequence[SalaryRecord] = ()
    errors: Sequence[BatchError] = ()

    @property
    def success(self) -> bool:
        return len(self.results) > 0

    @property
    def conflicts_only(self) -> bool:
        return bool(self.errors) and all(e.kind == BatchErrorKind.CONFLICT for e in self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
        }
