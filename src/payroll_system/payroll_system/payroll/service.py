from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..attendance.aggregator import AttendanceAggregator
from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..common.numbers import to_decimal
from ..common.validators import parse_bool, require_int, require_month, require_non_negative, require_year
from ..core.enums import BatchErrorKind
from ..core.exceptions import ConflictError, DomainError, NotFoundError, StorageError, ValidationError
from ..employees.model import EmployeeProfile
from ..employees.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import BatchError, BatchResult, SalaryInput, SalaryRecord
from .repository import SalaryRepository

logger = logging.getLogger(__name__)

# camelCase keys sent by the web client
_ALIASES = {
    "employeeIds": "employee_ids",
    "employeeId": "employee_id",
    "overtimeSoonHours": "overtime_soon_hours",
    "overtimeLateHours": "overtime_late_hours",
    "workingDays": "working_days",
    "daysOff": "days_off",
    "confirmOverwrite": "confirm_overwrite",
}

_ERROR_KINDS = (
    (NotFoundError, BatchErrorKind.NOT_FOUND),
    (ConflictError, BatchErrorKind.CONFLICT),
    (StorageError, BatchErrorKind.STORAGE),
    (ValidationError, BatchErrorKind.INVALID),
)


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(k, k): v for k, v in (data or {}).items()}


def _optional_non_negative(data: Mapping[str, Any], name: str) -> Optional[Decimal]:
    value = data.get(name)
    if value is None or value == "":
        return None
    return require_non_negative(value, name)


@dataclass(frozen=True)
class PayrollInputs:
    """Request-level inputs applied uniformly to every employee of a batch.

    ``working_days`` / ``days_off`` of None mean "take it from attendance".
    """

    overtime_soon_hours: Decimal = Decimal("0")
    overtime_late_hours: Decimal = Decimal("0")
    bonus: Decimal = Decimal("0")
    working_days: Optional[Decimal] = None
    days_off: Optional[Decimal] = None

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> "PayrollInputs":
        return cls(
            overtime_soon_hours=require_non_negative(data.get("overtime_soon_hours"), "overtime_soon_hours"),
            overtime_late_hours=require_non_negative(data.get("overtime_late_hours"), "overtime_late_hours"),
            bonus=require_non_negative(data.get("bonus"), "bonus"),
            working_days=_optional_non_negative(data, "working_days"),
            days_off=_optional_non_negative(data, "days_off"),
        )


@dataclass(frozen=True)
class BatchRequest:
    employee_ids: tuple[int, ...]
    month: int
    year: int
    inputs: PayrollInputs
    confirm_overwrite: bool = False

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> "BatchRequest":
        """Validate the whole request before any employee is processed."""
        data = _normalize_keys(data)

        raw_ids = data.get("employee_ids")
        if not isinstance(raw_ids, (list, tuple)) or not raw_ids:
            raise ValidationError("employee_ids must be a non-empty list")
        ids = [require_int(v, "employee_ids") for v in raw_ids]

        return cls(
            employee_ids=tuple(dict.fromkeys(ids)),
            month=require_month(data.get("month")),
            year=require_year(data.get("year")),
            inputs=PayrollInputs.parse(data),
            confirm_overwrite=parse_bool(data.get("confirm_overwrite"), "confirm_overwrite"),
        )


class PayrollService:
    """Salary calculation use cases over the payroll ledger.

    Every lookup-calculate-persist sequence for one (employee_id, month, year)
    runs under that key's lock; the ledger's insert_if_absent closes the gap
    between processes.
    """

    def __init__(
        self,
        salaries: SalaryRepository,
        employees: EmployeeRepository,
        aggregator: AttendanceAggregator,
        *,
        calculator: Optional[PayrollCalculator] = None,
        locks: Optional[KeyedLocks] = None,
    ):
        self._salaries = salaries
        self._employees = employees
        self._aggregator = aggregator
        self._calculator = calculator or StandardPayrollCalculator()
        self._locks = locks if locks is not None else KeyedLocks()

    # ---- batch ----

    def calculate_batch(
        self,
        data: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
        today: Optional[date] = None,
    ) -> BatchResult:
        request = BatchRequest.parse(data)
        now = now or now_local()
        today = today or now.date()

        results: list[SalaryRecord] = []
        errors: list[BatchError] = []
        for employee_id in request.employee_ids:
            try:
                record = self._calculate_one(
                    employee_id,
                    request.month,
                    request.year,
                    request.inputs,
                    confirm_overwrite=request.confirm_overwrite,
                    now=now,
                    today=today,
                )
            except DomainError as e:
                errors.append(self._to_batch_error(employee_id, e))
                continue
            results.append(record)

        total = len(request.employee_ids)
        message = f"Calculated salary for {len(results)} of {total} employee(s)"
        if errors:
            message += f", {len(errors)} failed"
        logger.info("[payroll] batch %s/%s: %s", request.month, request.year, message)
        return BatchResult(message=message, results=results, errors=errors)

    def _to_batch_error(self, employee_id: int, error: DomainError) -> BatchError:
        kind = BatchErrorKind.STORAGE
        for error_type, error_kind in _ERROR_KINDS:
            if isinstance(error, error_type):
                kind = error_kind
                break

        if kind == BatchErrorKind.STORAGE:
            logger.warning("[payroll] storage failure for employee_id=%s: %s", employee_id, error)
        else:
            logger.info("[payroll] skipped employee_id=%s (%s): %s", employee_id, kind.value, error)
        return BatchError(
            employee_id=employee_id,
            message=str(error),
            kind=kind,
            record_id=getattr(error, "record_id", None),
        )

    def _build_input(
        self,
        employee: EmployeeProfile,
        month: int,
        year: int,
        inputs: PayrollInputs,
        *,
        today: date,
    ) -> SalaryInput:
        working_days = inputs.working_days
        days_off = inputs.days_off
        if working_days is None or days_off is None:
            stats = self._aggregator.stats_for(employee.employee_id, month, year, today=today)
            if working_days is None:
                working_days = Decimal(stats.total_working_days)
            if days_off is None:
                days_off = to_decimal(stats.absences)

        return SalaryInput.from_profile(
            employee,
            working_days=working_days,
            days_off=days_off,
            overtime_soon_hours=inputs.overtime_soon_hours,
            overtime_late_hours=inputs.overtime_late_hours,
            bonus=inputs.bonus,
        )

    def _calculate_one(
        self,
        employee_id: int,
        month: int,
        year: int,
        inputs: PayrollInputs,
        *,
        confirm_overwrite: bool,
        now: datetime,
        today: date,
    ) -> SalaryRecord:
        with self._locks.hold((employee_id, month, year)):
            employee = self._employees.get_by_id(employee_id)
            if not employee:
                raise NotFoundError(f"Employee {employee_id} not found")

            existing = self._salaries.get_by_key(employee_id, month, year)
            if existing and not confirm_overwrite:
                raise ConflictError(
                    f"Salary record for {month}/{year} already exists for {employee.fullname}",
                    record_id=existing.record_id,
                )

            calculation = self._calculator.calculate(
                self._build_input(employee, month, year, inputs, today=today),
                now=now,
            )

            if existing:
                replaced = self._salaries.replace(existing.record_id, calculation, now=now)
                if replaced:
                    logger.info("[payroll] overwrote record_id=%s for employee_id=%s", replaced.record_id, employee_id)
                    return replaced

            record, created = self._salaries.insert_if_absent(
                employee_id=employee_id,
                month=month,
                year=year,
                calculation=calculation,
                now=now,
            )
            if created:
                return record

            # Another writer stored this key between our read and insert.
            if not confirm_overwrite:
                raise ConflictError(
                    f"Salary record for {month}/{year} already exists for {employee.fullname}",
                    record_id=record.record_id,
                )
            replaced = self._salaries.replace(record.record_id, calculation, now=now)
            if not replaced:
                raise StorageError(f"Salary record {record.record_id} could not be overwritten")
            return replaced

    # ---- single records ----

    def list_records(self) -> Sequence[SalaryRecord]:
        return self._salaries.list_all()

    def list_for_period(self, month: Any, year: Any) -> Sequence[SalaryRecord]:
        return self._salaries.list_for_period(require_month(month), require_year(year))

    def get_record(self, record_id: int) -> SalaryRecord:
        record = self._salaries.get_by_id(int(record_id))
        if not record:
            raise NotFoundError("Salary record not found")
        return record

    def create_record(
        self,
        data: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
        today: Optional[date] = None,
    ) -> SalaryRecord:
        """Single-employee calculation; same conflict/overwrite rules as the batch."""
        data = _normalize_keys(data)
        employee_id = require_int(data.get("employee_id"), "employee_id")
        month = require_month(data.get("month"))
        year = require_year(data.get("year"))
        inputs = PayrollInputs.parse(data)
        now = now or now_local()

        return self._calculate_one(
            employee_id,
            month,
            year,
            inputs,
            confirm_overwrite=parse_bool(data.get("confirm_overwrite"), "confirm_overwrite"),
            now=now,
            today=today or now.date(),
        )

    def update_record(
        self,
        record_id: int,
        data: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> SalaryRecord:
        """Recompute an existing record from the current profile.

        Inputs missing from ``data`` keep the values stored on the record.
        """
        current = self.get_record(record_id)
        data = _normalize_keys(data)
        now = now or now_local()
        previous = current.calculation

        def pick(name: str, default: Decimal) -> Decimal:
            value = _optional_non_negative(data, name)
            return default if value is None else value

        inputs = PayrollInputs(
            overtime_soon_hours=pick("overtime_soon_hours", previous.overtime_soon_hours),
            overtime_late_hours=pick("overtime_late_hours", previous.overtime_late_hours),
            bonus=pick("bonus", previous.bonus),
            working_days=pick("working_days", previous.working_days),
            days_off=pick("days_off", previous.days_off),
        )

        with self._locks.hold(current.key):
            employee = self._employees.get_by_id(current.employee_id)
            if not employee:
                raise NotFoundError(f"Employee {current.employee_id} not found")

            calculation = self._calculator.calculate(
                self._build_input(employee, current.month, current.year, inputs, today=now.date()),
                now=now,
            )
            updated = self._salaries.replace(current.record_id, calculation, now=now)
            if not updated:
                raise NotFoundError("Salary record not found")

        logger.info("[payroll] recalculated record_id=%s", updated.record_id)
        return updated

    def delete_record(self, record_id: int) -> None:
        if not self._salaries.delete_by_id(int(record_id)):
            raise NotFoundError("Salary record not found")
        logger.info("[payroll] deleted record_id=%s", record_id)
