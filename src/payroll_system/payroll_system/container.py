from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.aggregator import AttendanceAggregator
from .attendance.factory import ProjectionStrategyFactory
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .employees.memory_employee_repository import InMemoryEmployeeRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.memory_salary_repository import InMemorySalaryRepository
from .payroll.mysql_salary_repository import MySQLSalaryRepository
from .payroll.policy import PayrollPolicy
from .payroll.report_service import PayrollReportService
from .payroll.repository import SalaryRepository
from .payroll.service import PayrollService

STORAGE_BACKENDS = ("mysql", "memory")


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    salaries_repo: SalaryRepository

    policy: PayrollPolicy
    employee_service: EmployeeService
    attendance_service: AttendanceService
    attendance_aggregator: AttendanceAggregator
    payroll_service: PayrollService
    payroll_report_service: PayrollReportService


def build_container(
    *,
    db_config: Optional[dict] = None,
    storage_backend: str = "mysql",
    project_future_attendance: bool = True,
    payroll_policy: Optional[Mapping[str, Any]] = None,
) -> Container:
    backend = (storage_backend or "mysql").lower()
    if backend not in STORAGE_BACKENDS:
        raise ValidationError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}")

    conn: Optional[DatabaseConnection] = None
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config or {}))
        employees_repo = MySQLEmployeeRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn)
        salaries_repo = MySQLSalaryRepository(conn)
    else:
        employees_repo = InMemoryEmployeeRepository()
        attendance_repo = InMemoryAttendanceRepository()
        salaries_repo = InMemorySalaryRepository()

    policy = PayrollPolicy.from_overrides(payroll_policy)
    aggregator = AttendanceAggregator(
        attendance_repo,
        strategy_factory=ProjectionStrategyFactory(project_future_attendance=project_future_attendance),
    )

    employee_service = EmployeeService(employees_repo)
    attendance_service = AttendanceService(attendance_repo, employees_repo)
    payroll_service = PayrollService(
        salaries_repo,
        employees_repo,
        aggregator,
        calculator=StandardPayrollCalculator(policy),
    )
    payroll_report_service = PayrollReportService(salaries_repo, employees_repo)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        salaries_repo=salaries_repo,
        policy=policy,
        employee_service=employee_service,
        attendance_service=attendance_service,
        attendance_aggregator=aggregator,
        payroll_service=payroll_service,
        payroll_report_service=payroll_report_service,
    )
