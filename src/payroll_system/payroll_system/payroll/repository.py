from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import SalaryCalculation, SalaryRecord


class SalaryRepository(Protocol):
    """Payroll ledger keyed by (employee_id, month, year).

    Note: ``insert_if_absent`` must be atomic; it is the only way a record
    for a new key comes into existence.
    """

    def get_by_id(self, record_id: int) -> Optional[SalaryRecord]:
        raise NotImplementedError

    def get_by_key(self, employee_id: int, month: int, year: int) -> Optional[SalaryRecord]:
        raise NotImplementedError

    def insert_if_absent(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        calculation: SalaryCalculation,
        now: datetime,
    ) -> tuple[SalaryRecord, bool]:
        """Return (stored record, created). When the key exists nothing is written."""
        raise NotImplementedError

    def replace(self, record_id: int, calculation: SalaryCalculation, *, now: datetime) -> Optional[SalaryRecord]:
        """Swap the calculation, keeping id and created_at; None if the record is gone."""
        raise NotImplementedError

    def delete_by_id(self, record_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[SalaryRecord]:
        raise NotImplementedError

    def list_for_period(self, month: int, year: int) -> Sequence[SalaryRecord]:
        raise NotImplementedError

    def list_for_year(self, year: int) -> Sequence[SalaryRecord]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, year: Optional[int] = None) -> Sequence[SalaryRecord]:
        raise NotImplementedError
