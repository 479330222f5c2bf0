from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Lifecycle of one check-in record."""

    INCOMPLETE = "incomplete"
    PRESENT = "present"


class DayKind(str, Enum):
    """How a single attendance record counts towards payroll."""

    FULL = "full"
    HALF = "half"
    ABSENT = "absent"


class TodayStatus(str, Enum):
    NOT_CHECKED_IN = "not-checked-in"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"


class BatchErrorKind(str, Enum):
    """Why one employee in a payroll batch did not get a record."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"
    INVALID = "invalid"
