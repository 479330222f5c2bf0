from __future__ import annotations

import threading
from datetime import date, datetime

import pytest

from src.payroll_system.payroll_system.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.payroll_system.payroll_system.attendance.service import AttendanceService, worked_hours
from src.payroll_system.payroll_system.core.enums import AttendanceStatus, TodayStatus
from src.payroll_system.payroll_system.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.payroll_system.payroll_system.employees.memory_employee_repository import InMemoryEmployeeRepository
from src.payroll_system.payroll_system.employees.model import EmployeeProfile


@pytest.fixture
def service() -> AttendanceService:
    employees = InMemoryEmployeeRepository(
        [
            EmployeeProfile(employee_id=1, fullname="Tran Thi B"),
            EmployeeProfile(employee_id=2, fullname="Le Van C"),
        ]
    )
    return AttendanceService(InMemoryAttendanceRepository(), employees)


def test_check_in_creates_incomplete_record(service):
    record = service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0), notes="on site")

    assert record.status == AttendanceStatus.INCOMPLETE
    assert record.work_date == date(2024, 3, 4)
    assert record.check_in_notes == "on site"
    assert record.is_open


def test_second_check_in_without_check_out_is_a_conflict(service):
    first = service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0))

    with pytest.raises(ConflictError) as exc:
        service.record_check_in(1, now=datetime(2024, 3, 4, 8, 5))

    assert exc.value.record_id == first.attendance_id


def test_check_in_for_unknown_employee(service):
    with pytest.raises(NotFoundError):
        service.record_check_in(99, now=datetime(2024, 3, 4, 8, 0))


def test_check_out_computes_hours_and_overtime(service):
    service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0))

    record = service.record_check_out(1, now=datetime(2024, 3, 4, 17, 30), notes="done")

    assert record.working_hours == 9.5
    assert record.overtime_hours == 1.5
    assert record.status == AttendanceStatus.PRESENT
    assert record.check_out_notes == "done"
    assert not record.is_open


def test_check_out_closes_record_from_previous_day(service):
    service.record_check_in(1, now=datetime(2024, 3, 4, 22, 0))

    record = service.record_check_out(1, now=datetime(2024, 3, 5, 2, 0))

    assert record.work_date == date(2024, 3, 4)
    assert record.working_hours == 4.0


def test_check_out_without_open_record(service):
    with pytest.raises(NotFoundError):
        service.record_check_out(1, now=datetime(2024, 3, 4, 17, 0))


def test_check_in_allowed_again_after_check_out(service):
    service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0))
    service.record_check_out(1, now=datetime(2024, 3, 4, 12, 0))

    again = service.record_check_in(1, now=datetime(2024, 3, 4, 13, 0))

    assert again.is_open


def test_worked_hours_rounds_to_two_decimals():
    hours, overtime = worked_hours(datetime(2024, 3, 4, 8, 0), datetime(2024, 3, 4, 8, 20))

    assert hours == 0.33
    assert overtime == 0.0


def test_concurrent_check_ins_open_a_single_record(service):
    outcomes: list[str] = []
    lock = threading.Lock()

    def attempt():
        try:
            service.record_check_in(2, now=datetime(2024, 3, 4, 8, 0))
            result = "ok"
        except ConflictError:
            result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 7


def test_today_status_transitions(service):
    today = date(2024, 3, 4)
    assert service.today_status(1, today=today)[0] == TodayStatus.NOT_CHECKED_IN

    service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0))
    assert service.today_status(1, today=today)[0] == TodayStatus.CHECKED_IN

    service.record_check_out(1, now=datetime(2024, 3, 4, 17, 0))
    status, record = service.today_status(1, today=today)
    assert status == TodayStatus.CHECKED_OUT
    assert record.working_hours == 9.0


def test_history_is_paginated_newest_first(service):
    for day in range(4, 9):
        service.record_check_in(1, now=datetime(2024, 3, day, 8, 0))
        service.record_check_out(1, now=datetime(2024, 3, day, 16, 0))

    page = service.history(1, page=2, limit=2)

    assert page.total == 5
    assert page.pages == 3
    assert [r.work_date.day for r in page.records] == [6, 5]


def test_query_by_employee_and_month(service):
    service.record_check_in(1, now=datetime(2024, 2, 28, 8, 0))
    service.record_check_out(1, now=datetime(2024, 2, 28, 16, 0))
    service.record_check_in(1, now=datetime(2024, 3, 1, 8, 0))
    service.record_check_out(1, now=datetime(2024, 3, 1, 16, 0))

    records = service.query_by_employee_and_month(1, 3, 2024)

    assert [r.work_date for r in records] == [date(2024, 3, 1)]

    with pytest.raises(ValidationError):
        service.query_by_employee_and_month(1, 13, 2024)


def test_employee_records_summary(service):
    service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0))
    service.record_check_out(1, now=datetime(2024, 3, 4, 18, 0))
    service.record_check_in(1, now=datetime(2024, 3, 5, 8, 0))

    records, summary = service.employee_records(1, start=date(2024, 3, 1), end=date(2024, 3, 31))

    assert len(records) == 2
    assert summary == {
        "total_hours": 10.0,
        "total_overtime_hours": 2.0,
        "present_days": 1,
        "total_records": 2,
    }


def test_summary_groups_by_employee_sorted_by_name(service):
    service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0))
    service.record_check_out(1, now=datetime(2024, 3, 4, 16, 0))
    service.record_check_in(2, now=datetime(2024, 3, 4, 8, 0))
    service.record_check_out(2, now=datetime(2024, 3, 4, 17, 0))

    rows = service.summary(month=3, year=2024)

    assert [r.fullname for r in rows] == ["Le Van C", "Tran Thi B"]
    assert rows[0].total_hours == 9.0
    assert rows[0].total_overtime == 1.0
    assert rows[1].present_days == 1


def test_summary_requires_a_period(service):
    with pytest.raises(ValidationError):
        service.summary()


def test_delete_record(service):
    record = service.record_check_in(1, now=datetime(2024, 3, 4, 8, 0))

    service.delete_record(record.attendance_id)

    with pytest.raises(NotFoundError):
        service.delete_record(record.attendance_id)
