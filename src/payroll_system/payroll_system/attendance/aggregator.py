from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import count_weekdays, month_bounds
from ..core.constants import FULL_DAY_HOURS, HALF_DAY_HOURS
from ..core.enums import DayKind
from .factory import ProjectionStrategyFactory
from .model import AttendanceRecord, AttendanceStats
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def working_days_in_month(month: int, year: int) -> int:
    """Mon-Fri days in the calendar month (no holiday calendar)."""
    first, last = month_bounds(month, year)
    return count_weekdays(first, last)


class AttendanceAggregator:
    """Turns a month of ledger records into the day counts payroll consumes.

    Reads never raise: if the ledger cannot be read the caller gets zeroed
    stats with the calendar's working-day count.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        strategy_factory: Optional[ProjectionStrategyFactory] = None,
        full_day_hours: float = FULL_DAY_HOURS,
        half_day_hours: float = HALF_DAY_HOURS,
    ):
        self._attendance = attendance
        self._factory = strategy_factory or ProjectionStrategyFactory()
        self._full_day_hours = full_day_hours
        self._half_day_hours = half_day_hours

    def classify(self, record: AttendanceRecord) -> DayKind:
        hours = record.working_hours or 0
        if hours >= self._full_day_hours:
            return DayKind.FULL
        if hours >= self._half_day_hours:
            return DayKind.HALF
        return DayKind.ABSENT

    def stats_for(self, employee_id: int, month: int, year: int, *, today: Optional[date] = None) -> AttendanceStats:
        today = today or date.today()
        total_working_days = working_days_in_month(month, year)

        try:
            first, last = month_bounds(month, year)
            records = self._attendance.list_for_employee(employee_id, start_date=first, end_date=last)
        except Exception:
            logger.exception(
                "[attendance] cannot read ledger for employee_id=%s %s/%s, using zeroed stats",
                employee_id,
                month,
                year,
            )
            return AttendanceStats(
                employee_id=employee_id,
                month=month,
                year=year,
                total_working_days=total_working_days,
            )

        full_days = 0
        half_days = 0
        for r in records:
            if (r.work_date.month, r.work_date.year) != (month, year):
                continue
            kind = self.classify(r)
            if kind == DayKind.FULL:
                full_days += 1
            elif kind == DayKind.HALF:
                half_days += 1

        strategy = self._factory.for_period(month=month, year=year, today=today)
        decision = strategy.project(month=month, year=year, today=today)
        if decision.projected_days:
            logger.info("[attendance] employee_id=%s %s/%s: %s", employee_id, month, year, decision.note)
        full_days += decision.projected_days

        work_days = full_days + 0.5 * half_days
        return AttendanceStats(
            employee_id=employee_id,
            month=month,
            year=year,
            full_days=full_days,
            half_days=half_days,
            work_days=work_days,
            absences=total_working_days - work_days,
            total_working_days=total_working_days,
            projected_days=decision.projected_days,
        )

    def summary_for(
        self,
        employee_ids: Iterable[int],
        month: int,
        year: int,
        *,
        today: Optional[date] = None,
    ) -> dict[int, AttendanceStats]:
        return {int(eid): self.stats_for(int(eid), month, year, today=today) for eid in employee_ids}
