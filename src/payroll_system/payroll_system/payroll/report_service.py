from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..common.numbers import ZERO, as_float
from ..common.validators import require_month, require_year
from ..core.exceptions import NotFoundError
from ..employees.model import EmployeeProfile
from ..employees.repository import EmployeeRepository
from .model import SalaryRecord
from .repository import SalaryRepository

UNKNOWN_DEPARTMENT = "Unknown"


@dataclass(frozen=True)
class PayrollTotals:
    employee_count: int = 0
    total_gross_salary: Decimal = ZERO
    total_net_salary: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_insurance: Decimal = ZERO

    @classmethod
    def of(cls, records: Sequence[SalaryRecord], *, employee_count: Optional[int] = None) -> "PayrollTotals":
        return cls(
            employee_count=len(records) if employee_count is None else employee_count,
            total_gross_salary=sum((r.calculation.gross_salary for r in records), ZERO),
            total_net_salary=sum((r.calculation.net_salary for r in records), ZERO),
            total_tax=sum((r.calculation.total_tax for r in records), ZERO),
            total_insurance=sum((r.calculation.total_insurance for r in records), ZERO),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_count": self.employee_count,
            "total_gross_salary": as_float(self.total_gross_salary),
            "total_net_salary": as_float(self.total_net_salary),
            "total_tax": as_float(self.total_tax),
            "total_insurance": as_float(self.total_insurance),
        }


@dataclass(frozen=True)
class DepartmentSummary:
    department: str
    employee_count: int
    total_gross_salary: Decimal
    total_net_salary: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "department": self.department,
            "employee_count": self.employee_count,
            "total_gross_salary": as_float(self.total_gross_salary),
            "total_net_salary": as_float(self.total_net_salary),
        }


@dataclass(frozen=True)
class MonthlyReport:
    month: int
    year: int
    totals: PayrollTotals
    departments: list[DepartmentSummary] = field(default_factory=list)
    records: list[tuple[SalaryRecord, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        totals = self.totals.to_dict()
        return {
            "month": self.month,
            "year": self.year,
            "total_employees": totals.pop("employee_count"),
            **totals,
            "departments": [d.to_dict() for d in self.departments],
            "records": [dict(r.to_dict(), department=dept) for r, dept in self.records],
        }


@dataclass(frozen=True)
class YearlyReport:
    year: int
    totals: PayrollTotals
    monthly: list[tuple[int, PayrollTotals]] = field(default_factory=list)
    departments: list[DepartmentSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        totals = self.totals.to_dict()
        return {
            "year": self.year,
            "total_employees": totals.pop("employee_count"),
            **totals,
            "monthly_summary": [dict(month=m, **t.to_dict()) for m, t in self.monthly],
            "department_summary": [d.to_dict() for d in self.departments],
        }


@dataclass(frozen=True)
class EmployeeHistory:
    employee: EmployeeProfile
    totals: PayrollTotals
    records: list[SalaryRecord] = field(default_factory=list)

    @property
    def avg_gross_salary(self) -> Decimal:
        return self.totals.total_gross_salary / len(self.records) if self.records else ZERO

    @property
    def avg_net_salary(self) -> Decimal:
        return self.totals.total_net_salary / len(self.records) if self.records else ZERO

    def to_dict(self) -> dict[str, Any]:
        totals = self.totals.to_dict()
        return {
            "employee": {
                "id": self.employee.employee_id,
                "fullname": self.employee.fullname,
                "job_title": self.employee.job_title,
                "department": self.employee.department,
                "created_at": self.employee.created_at.isoformat() if self.employee.created_at else None,
            },
            "summary": {
                "record_count": totals.pop("employee_count"),
                **totals,
                "avg_gross_salary": as_float(self.avg_gross_salary),
                "avg_net_salary": as_float(self.avg_net_salary),
            },
            "records": [r.to_dict() for r in self.records],
        }


class PayrollReportService:
    """Read-only aggregates over stored salary records."""

    def __init__(self, salaries: SalaryRepository, employees: EmployeeRepository):
        self._salaries = salaries
        self._employees = employees

    def _departments(self) -> dict[int, str]:
        return {e.employee_id: e.department or UNKNOWN_DEPARTMENT for e in self._employees.list_all()}

    @staticmethod
    def _group_by_department(
        records: Iterable[SalaryRecord],
        departments: dict[int, str],
    ) -> list[DepartmentSummary]:
        grouped: dict[str, list[SalaryRecord]] = defaultdict(list)
        for r in records:
            grouped[departments.get(r.employee_id, UNKNOWN_DEPARTMENT)].append(r)

        out = []
        for dept, items in grouped.items():
            out.append(
                DepartmentSummary(
                    department=dept,
                    employee_count=len({r.employee_id for r in items}),
                    total_gross_salary=sum((r.calculation.gross_salary for r in items), ZERO),
                    total_net_salary=sum((r.calculation.net_salary for r in items), ZERO),
                )
            )
        out.sort(key=lambda d: d.department)
        return out

    def monthly(self, month: Any, year: Any) -> MonthlyReport:
        month = require_month(month)
        year = require_year(year)
        records = list(self._salaries.list_for_period(month, year))
        if not records:
            return MonthlyReport(month=month, year=year, totals=PayrollTotals())

        departments = self._departments()
        return MonthlyReport(
            month=month,
            year=year,
            totals=PayrollTotals.of(records),
            departments=self._group_by_department(records, departments),
            records=[(r, departments.get(r.employee_id, UNKNOWN_DEPARTMENT)) for r in records],
        )

    def yearly(self, year: Any) -> YearlyReport:
        year = require_year(year)
        records = list(self._salaries.list_for_year(year))
        if not records:
            return YearlyReport(year=year, totals=PayrollTotals())

        by_month: dict[int, list[SalaryRecord]] = defaultdict(list)
        for r in records:
            by_month[r.month].append(r)

        return YearlyReport(
            year=year,
            totals=PayrollTotals.of(records, employee_count=len({r.employee_id for r in records})),
            monthly=[(m, PayrollTotals.of(by_month.get(m, []))) for m in range(1, 13)],
            departments=self._group_by_department(records, self._departments()),
        )

    def employee_history(self, employee_id: int, *, year: Any = None) -> EmployeeHistory:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")

        year = require_year(year) if year not in (None, "") else None
        records = sorted(
            self._salaries.list_for_employee(employee.employee_id, year=year),
            key=lambda r: (r.year, r.month),
        )
        return EmployeeHistory(employee=employee, totals=PayrollTotals.of(records), records=records)
