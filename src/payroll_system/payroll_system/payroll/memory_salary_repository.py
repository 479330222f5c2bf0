from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Sequence

from .model import SalaryCalculation, SalaryRecord
from .repository import SalaryRepository


def _newest_first(records: Iterable[SalaryRecord]) -> list[SalaryRecord]:
    return sorted(records, key=lambda r: (-r.year, -r.month, r.employee_id))


class InMemorySalaryRepository(SalaryRepository):
    """Payroll ledger in a dict with a (employee_id, month, year) index.

    A single lock makes insert_if_absent and replace atomic.
    """

    def __init__(self, records: Iterable[SalaryRecord] = ()):
        self._lock = threading.Lock()
        self._by_id: dict[int, SalaryRecord] = {}
        self._by_key: dict[tuple[int, int, int], int] = {}
        for r in records:
            self._by_id[r.record_id] = r
            self._by_key[r.key] = r.record_id
        self._next_id = max(self._by_id, default=0) + 1

    def get_by_id(self, record_id: int) -> Optional[SalaryRecord]:
        return self._by_id.get(int(record_id))

    def get_by_key(self, employee_id: int, month: int, year: int) -> Optional[SalaryRecord]:
        record_id = self._by_key.get((int(employee_id), int(month), int(year)))
        return self._by_id.get(record_id) if record_id is not None else None

    def insert_if_absent(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        calculation: SalaryCalculation,
        now: datetime,
    ) -> tuple[SalaryRecord, bool]:
        key = (int(employee_id), int(month), int(year))
        with self._lock:
            existing_id = self._by_key.get(key)
            if existing_id is not None:
                return self._by_id[existing_id], False

            record = SalaryRecord(
                record_id=self._next_id,
                employee_id=key[0],
                month=key[1],
                year=key[2],
                calculation=calculation,
                created_at=now,
            )
            self._next_id += 1
            self._by_id[record.record_id] = record
            self._by_key[key] = record.record_id
            return record, True

    def replace(self, record_id: int, calculation: SalaryCalculation, *, now: datetime) -> Optional[SalaryRecord]:
        with self._lock:
            current = self._by_id.get(int(record_id))
            if not current:
                return None
            updated = replace(current, calculation=calculation, updated_at=now)
            self._by_id[updated.record_id] = updated
            return updated

    def delete_by_id(self, record_id: int) -> bool:
        with self._lock:
            record = self._by_id.pop(int(record_id), None)
            if not record:
                return False
            self._by_key.pop(record.key, None)
            return True

    def list_all(self) -> Sequence[SalaryRecord]:
        return _newest_first(self._by_id.values())

    def list_for_period(self, month: int, year: int) -> Sequence[SalaryRecord]:
        return _newest_first(r for r in self._by_id.values() if r.month == int(month) and r.year == int(year))

    def list_for_year(self, year: int) -> Sequence[SalaryRecord]:
        return _newest_first(r for r in self._by_id.values() if r.year == int(year))

    def list_for_employee(self, employee_id: int, *, year: Optional[int] = None) -> Sequence[SalaryRecord]:
        items = [
            r
            for r in self._by_id.values()
            if r.employee_id == int(employee_id) and (year is None or r.year == int(year))
        ]
        items.sort(key=lambda r: (r.year, r.month))
        return items
