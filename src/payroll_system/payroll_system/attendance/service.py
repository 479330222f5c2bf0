from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import require_month, require_year
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT, STANDARD_DAY_HOURS
from ..core.enums import AttendanceStatus, TodayStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendancePage:
    records: Sequence[AttendanceRecord]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "pagination": {"total": self.total, "page": self.page, "limit": self.limit, "pages": self.pages},
        }


@dataclass(frozen=True)
class EmployeeAttendanceSummary:
    employee_id: int
    fullname: str
    total_hours: float
    total_overtime: float
    present_days: int
    record_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "fullname": self.fullname,
            "total_hours": self.total_hours,
            "total_overtime": self.total_overtime,
            "present_days": self.present_days,
            "record_count": self.record_count,
        }


def worked_hours(check_in: datetime, check_out: datetime) -> tuple[float, float]:
    """(working_hours, overtime_hours), both rounded to 2 decimals."""
    hours = round((check_out - check_in).total_seconds() / 3600, 2)
    overtime = round(max(0.0, hours - STANDARD_DAY_HOURS), 2)
    return hours, overtime


class AttendanceService:
    """Check-in/check-out use cases over the attendance ledger."""

    def __init__(self, attendance: AttendanceRepository, employees: EmployeeRepository):
        self._attendance = attendance
        self._employees = employees

    def record_check_in(self, employee_id: int, *, now: Optional[datetime] = None, notes: str = "") -> AttendanceRecord:
        now = now or now_local()
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        record = self._attendance.create_checkin(
            employee_id=employee_id,
            work_date=now.date(),
            check_in_time=now,
            notes=notes or "",
        )
        if record is None:
            open_record = self._attendance.get_open_for_employee(employee_id)
            raise ConflictError(
                "Employee already checked in; check out first",
                record_id=open_record.attendance_id if open_record else None,
            )
        logger.info("[attendance] check-in employee_id=%s at %s", employee_id, now.isoformat())
        return record

    def record_check_out(self, employee_id: int, *, now: Optional[datetime] = None, notes: str = "") -> AttendanceRecord:
        now = now or now_local()
        open_record = self._attendance.get_open_for_employee(employee_id)
        if not open_record:
            raise NotFoundError("No active check-in found for this employee")

        hours, overtime = worked_hours(open_record.check_in_time, now)
        closed = self._attendance.close_checkout(
            attendance_id=open_record.attendance_id,
            check_out_time=now,
            notes=notes or "",
            working_hours=hours,
            overtime_hours=overtime,
        )
        if closed is None:
            raise ConflictError("Attendance record was already checked out", record_id=open_record.attendance_id)
        logger.info("[attendance] check-out employee_id=%s hours=%s overtime=%s", employee_id, hours, overtime)
        return closed

    def query_by_employee_and_month(self, employee_id: int, month: Any, year: Any) -> Sequence[AttendanceRecord]:
        first, last = month_bounds(require_month(month), require_year(year))
        return self._attendance.list_for_employee(employee_id, start_date=first, end_date=last)

    def today_status(self, employee_id: int, *, today: Optional[date] = None) -> tuple[TodayStatus, Optional[AttendanceRecord]]:
        today = today or now_local().date()
        open_record = self._attendance.get_open_for_employee(employee_id)
        if open_record:
            return TodayStatus.CHECKED_IN, open_record

        record = self._attendance.get_latest_for_employee_and_date(employee_id, today)
        if not record:
            return TodayStatus.NOT_CHECKED_IN, None
        return TodayStatus.CHECKED_OUT, record

    def history(self, employee_id: int, *, page: Any = 1, limit: Any = DEFAULT_HISTORY_LIMIT) -> AttendancePage:
        try:
            page = max(1, int(page or 1))
            limit = min(MAX_HISTORY_LIMIT, max(1, int(limit or DEFAULT_HISTORY_LIMIT)))
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be integers")

        records = list(self._attendance.list_for_employee(employee_id))
        start = (page - 1) * limit
        return AttendancePage(records=records[start : start + limit], total=len(records), page=page, limit=limit)

    def employee_records(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> tuple[Sequence[AttendanceRecord], dict[str, Any]]:
        if start and end and start > end:
            raise ValidationError("start must not be after end")

        records = self._attendance.list_for_employee(employee_id, start_date=start, end_date=end)
        summary = {
            "total_hours": round(sum(r.working_hours for r in records), 2),
            "total_overtime_hours": round(sum(r.overtime_hours for r in records), 2),
            "present_days": sum(1 for r in records if r.status == AttendanceStatus.PRESENT),
            "total_records": len(records),
        }
        return records, summary

    def summary(
        self,
        *,
        month: Any = None,
        year: Any = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[EmployeeAttendanceSummary]:
        """Per-employee totals for a month or an explicit date range, sorted by name."""
        if month is not None and year is not None:
            start, end = month_bounds(require_month(month), require_year(year))
        if not start or not end:
            raise ValidationError("either month/year or start/end is required")
        if start > end:
            raise ValidationError("start must not be after end")

        grouped: dict[int, list[AttendanceRecord]] = defaultdict(list)
        for r in self._attendance.list_in_range(start_date=start, end_date=end):
            grouped[r.employee_id].append(r)

        rows = []
        for employee_id, records in grouped.items():
            employee = self._employees.get_by_id(employee_id)
            rows.append(
                EmployeeAttendanceSummary(
                    employee_id=employee_id,
                    fullname=employee.fullname if employee else "Unknown",
                    total_hours=round(sum(r.working_hours for r in records), 2),
                    total_overtime=round(sum(r.overtime_hours for r in records), 2),
                    present_days=sum(1 for r in records if r.status == AttendanceStatus.PRESENT),
                    record_count=len(records),
                )
            )
        rows.sort(key=lambda s: s.fullname.lower())
        return rows

    def delete_record(self, attendance_id: int) -> None:
        if not self._attendance.delete_by_id(int(attendance_id)):
            raise NotFoundError("Attendance record not found")
        logger.info("[attendance] deleted attendance_id=%s", attendance_id)
