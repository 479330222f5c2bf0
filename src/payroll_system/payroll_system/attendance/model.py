from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in event, closed once by check-out."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    check_in_notes: str = ""
    check_out_notes: str = ""
    working_hours: float = 0.0
    overtime_hours: float = 0.0
    status: AttendanceStatus = AttendanceStatus.INCOMPLETE

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.attendance_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "check_in": {"time": self.check_in_time.isoformat(), "notes": self.check_in_notes},
            "check_out": {
                "time": self.check_out_time.isoformat() if self.check_out_time else None,
                "notes": self.check_out_notes,
            },
            "working_hours": self.working_hours,
            "overtime": self.overtime_hours,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class AttendanceStats:
    """Working-day statistics for one (employee, month, year); derived, never stored.

    For the current month ``full_days`` includes ``projected_days`` when the
    optimistic projection is enabled, so the figures are a forecast until the
    month closes.
    """

    employee_id: int
    month: int
    year: int
    full_days: int = 0
    half_days: int = 0
    work_days: float = 0.0
    absences: float = 0.0
    total_working_days: int = 0
    projected_days: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "month": self.month,
            "year": self.year,
            "full_days": self.full_days,
            "half_days": self.half_days,
            "work_days": self.work_days,
            "absences": self.absences,
            "total_working_days": self.total_working_days,
            "projected_days": self.projected_days,
        }
