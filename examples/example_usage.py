"""Example: drive the service layer directly (no Flask).

Uses the in-memory store so it runs without a database.
"""

from datetime import datetime

from src.payroll_system.payroll_system.container import build_container
from src.payroll_system.payroll_system.payroll.export import export_salary_csv


def main():
    container = build_container(storage_backend="memory", project_future_attendance=False)

    employee = container.employee_service.create_employee(
        {
            "fullname": "Nguyen Van An",
            "salary": 20_000_000,
            "dependents": 1,
            "probation": "no",
            "allowances": {"food": 730_000, "phone": 200_000},
        }
    )

    attendance = container.attendance_service
    attendance.record_check_in(employee.employee_id, now=datetime(2024, 3, 4, 8, 0))
    attendance.record_check_out(employee.employee_id, now=datetime(2024, 3, 4, 17, 30))

    result = container.payroll_service.calculate_batch(
        {
            "employee_ids": [employee.employee_id],
            "month": 3,
            "year": 2024,
            "working_days": 21,
            "days_off": 0,
            "overtime_soon_hours": 2,
        }
    )
    print(result.message)
    for record in result.results:
        c = record.calculation
        print(f"{c.fullname}: gross={c.gross_salary:,.0f} tax={c.total_tax:,.0f} net={c.net_salary:,.0f}")

    print(export_salary_csv(result.results).decode("utf-8-sig"))


if __name__ == "__main__":
    main()
