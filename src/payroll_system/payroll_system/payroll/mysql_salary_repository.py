from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.numbers import to_decimal
from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import DuplicateKeyError, db_cursor, fetchall, fetchone
from .model import SalaryCalculation, SalaryRecord
from .repository import SalaryRepository

_DECIMAL_FIELDS = (
    "gross_salary",
    "effective_gross",
    "working_days",
    "days_off",
    "work_days",
    "hourly_rate",
    "adjusted_salary",
    "overtime_soon_hours",
    "overtime_late_hours",
    "overtime_soon_pay",
    "overtime_late_pay",
    "total_overtime",
    "food",
    "clothes",
    "parking",
    "fuel",
    "house_rent",
    "phone",
    "total_benefits",
    "health_insurance",
    "social_insurance",
    "accident_insurance",
    "total_insurance",
    "personal_relief",
    "taxable_income",
    "total_tax",
    "bonus",
    "net_salary",
)

_CALC_COLUMNS = (
    ("fullname",)
    + _DECIMAL_FIELDS
    + ("tax_by_bracket", "dependents", "is_probation", "is_vietnamese", "calculated_at")
)

_COLUMNS = ", ".join(("record_id", "employee_id", "month", "year") + _CALC_COLUMNS + ("created_at", "updated_at"))

_ORDER_NEWEST = "ORDER BY year DESC, month DESC, employee_id"


def _calc_params(c: SalaryCalculation) -> tuple:
    values: list[object] = [c.fullname]
    values.extend(getattr(c, name) for name in _DECIMAL_FIELDS)
    values.append(json.dumps([str(v) for v in c.tax_by_bracket]))
    values.extend([c.dependents, int(c.is_probation), int(c.is_vietnamese), c.calculated_at])
    return tuple(values)


def _row_to_record(r: dict) -> SalaryRecord:
    brackets = r.get("tax_by_bracket") or "[]"
    if isinstance(brackets, (bytes, str)):
        brackets = json.loads(brackets)

    decimals: dict[str, Decimal] = {name: to_decimal(r.get(name)) for name in _DECIMAL_FIELDS}
    calculation = SalaryCalculation(
        fullname=r["fullname"],
        tax_by_bracket=tuple(to_decimal(v) for v in brackets),
        dependents=int(r.get("dependents") or 0),
        is_probation=bool(r.get("is_probation")),
        is_vietnamese=bool(r.get("is_vietnamese")),
        calculated_at=r["calculated_at"],
        **decimals,
    )
    return SalaryRecord(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        calculation=calculation,
        created_at=r["created_at"],
        updated_at=r.get("updated_at"),
    )


class MySQLSalaryRepository(SalaryRepository):
    """Payroll ledger on MySQL; ``uq_salary_period`` enforces one record per key."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_by_key(self, employee_id: int, month: int, year: int) -> Optional[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM salary_records WHERE employee_id=%s AND month=%s AND year=%s",
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def insert_if_absent(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        calculation: SalaryCalculation,
        now: datetime,
    ) -> tuple[SalaryRecord, bool]:
        columns = ("employee_id", "month", "year") + _CALC_COLUMNS + ("created_at",)
        placeholders = ",".join(["%s"] * len(columns))
        params = (int(employee_id), int(month), int(year)) + _calc_params(calculation) + (now,)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO salary_records({', '.join(columns)}) VALUES({placeholders})",
                    params,
                )
                new_id = int(cur.lastrowid)
        except DuplicateKeyError:
            existing = self.get_by_key(employee_id, month, year)
            if not existing:
                raise StorageError("Salary record vanished during insert, retry the request")
            return existing, False

        record = SalaryRecord(
            record_id=new_id,
            employee_id=int(employee_id),
            month=int(month),
            year=int(year),
            calculation=calculation,
            created_at=now,
        )
        return record, True

    def replace(self, record_id: int, calculation: SalaryCalculation, *, now: datetime) -> Optional[SalaryRecord]:
        assignments = ", ".join(f"{name}=%s" for name in _CALC_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE salary_records SET {assignments}, updated_at=%s WHERE record_id=%s",
                _calc_params(calculation) + (now, int(record_id)),
            )
            if cur.rowcount == 0:
                return None
        return self.get_by_id(record_id)

    def delete_by_id(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM salary_records WHERE record_id=%s", (int(record_id),))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_records {_ORDER_NEWEST}")
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_period(self, month: int, year: int) -> Sequence[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM salary_records WHERE month=%s AND year=%s {_ORDER_NEWEST}",
                (int(month), int(year)),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_year(self, year: int) -> Sequence[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_records WHERE year=%s {_ORDER_NEWEST}", (int(year),))
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_employee(self, employee_id: int, *, year: Optional[int] = None) -> Sequence[SalaryRecord]:
        sql = f"SELECT {_COLUMNS} FROM salary_records WHERE employee_id=%s"
        params: list[object] = [int(employee_id)]
        if year is not None:
            sql += " AND year=%s"
            params.append(int(year))
        sql += " ORDER BY year, month"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]
