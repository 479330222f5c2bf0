from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.locks import KeyedLocks
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    """Attendance ledger kept in a dict.

    Open/close transitions run under a per-employee lock, so an employee
    never has more than one open record.
    """

    def __init__(self, records: Iterable[AttendanceRecord] = ()):
        self._id_lock = threading.Lock()
        self._employee_locks = KeyedLocks()
        self._by_id: dict[int, AttendanceRecord] = {r.attendance_id: r for r in records}
        self._next_id = max(self._by_id, default=0) + 1

    def _new_id(self) -> int:
        with self._id_lock:
            new_id = self._next_id
            self._next_id += 1
            return new_id

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(int(attendance_id))

    def get_open_for_employee(self, employee_id: int) -> Optional[AttendanceRecord]:
        for r in list(self._by_id.values()):
            if r.employee_id == employee_id and r.is_open:
                return r
        return None

    def get_latest_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        items = [r for r in self._by_id.values() if r.employee_id == employee_id and r.work_date == work_date]
        if not items:
            return None
        return max(items, key=lambda r: r.check_in_time)

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        notes: str = "",
    ) -> Optional[AttendanceRecord]:
        with self._employee_locks.hold(employee_id):
            if self.get_open_for_employee(employee_id):
                return None
            rec = AttendanceRecord(
                attendance_id=self._new_id(),
                employee_id=employee_id,
                work_date=work_date,
                check_in_time=check_in_time,
                check_in_notes=notes,
            )
            self._by_id[rec.attendance_id] = rec
            return rec

    def close_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        notes: str,
        working_hours: float,
        overtime_hours: float,
    ) -> Optional[AttendanceRecord]:
        current = self._by_id.get(int(attendance_id))
        if not current:
            return None
        with self._employee_locks.hold(current.employee_id):
            current = self._by_id.get(int(attendance_id))
            if not current or not current.is_open:
                return None
            closed = replace(
                current,
                check_out_time=check_out_time,
                check_out_notes=notes,
                working_hours=working_hours,
                overtime_hours=overtime_hours,
                status=AttendanceStatus.PRESENT,
            )
            self._by_id[closed.attendance_id] = closed
            return closed

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        items = [
            r
            for r in self._by_id.values()
            if r.employee_id == employee_id
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return items

    def list_in_range(self, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        items = [r for r in self._by_id.values() if start_date <= r.work_date <= end_date]
        items.sort(key=lambda r: (r.work_date, r.employee_id))
        return items

    def delete_by_id(self, attendance_id: int) -> bool:
        return self._by_id.pop(int(attendance_id), None) is not None
