from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open_for_employee(self, employee_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_latest_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        notes: str = "",
    ) -> Optional[AttendanceRecord]:
        """Atomically open a record.

        Returns None (and writes nothing) when the employee already has an open record.
        """
        raise NotImplementedError

    def close_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        notes: str,
        working_hours: float,
        overtime_hours: float,
    ) -> Optional[AttendanceRecord]:
        """Atomically close a record that is still open; None if it was not open."""
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest first."""
        raise NotImplementedError

    def list_in_range(self, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def delete_by_id(self, attendance_id: int) -> bool:
        raise NotImplementedError
