from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.numbers import to_decimal
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Allowances, EmployeeProfile
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, fullname, salary, dependents, probation, nationality,
    allowance_food, allowance_clothes, allowance_parking, allowance_fuel,
    allowance_house_rent, allowance_phone,
    department, id_number, job_title, email, contract_status,
    bank_name, bank_account_name, bank_account_number, created_at, updated_at
"""


def _row_to_profile(r: dict) -> EmployeeProfile:
    return EmployeeProfile(
        employee_id=int(r["employee_id"]),
        fullname=r["fullname"],
        salary=to_decimal(r.get("salary")),
        dependents=int(r.get("dependents") or 0),
        probation=bool(r.get("probation")),
        nationality=r.get("nationality") or "",
        allowances=Allowances(
            food=to_decimal(r.get("allowance_food")),
            clothes=to_decimal(r.get("allowance_clothes")),
            parking=to_decimal(r.get("allowance_parking")),
            fuel=to_decimal(r.get("allowance_fuel")),
            house_rent=to_decimal(r.get("allowance_house_rent")),
            phone=to_decimal(r.get("allowance_phone")),
        ),
        department=r.get("department"),
        id_number=r.get("id_number") or "",
        job_title=r.get("job_title") or "",
        email=r.get("email") or "",
        contract_status=r.get("contract_status") or "",
        bank_name=r.get("bank_name") or "",
        bank_account_name=r.get("bank_account_name") or "",
        bank_account_number=r.get("bank_account_number") or "",
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _profile_params(p: EmployeeProfile) -> tuple:
    a = p.allowances
    return (
        p.fullname, p.salary, p.dependents, int(p.probation), p.nationality,
        a.food, a.clothes, a.parking, a.fuel, a.house_rent, a.phone,
        p.department, p.id_number, p.job_title, p.email, p.contract_status,
        p.bank_name, p.bank_account_name, p.bank_account_number,
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _row_to_profile(row) if row else None

    def list_all(self) -> Sequence[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY employee_id")
            return [_row_to_profile(r) for r in fetchall(cur)]

    def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(
                    fullname, salary, dependents, probation, nationality,
                    allowance_food, allowance_clothes, allowance_parking, allowance_fuel,
                    allowance_house_rent, allowance_phone,
                    department, id_number, job_title, email, contract_status,
                    bank_name, bank_account_name, bank_account_number, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _profile_params(profile) + (profile.created_at,),
            )
            return replace(profile, employee_id=int(cur.lastrowid))

    def update(self, profile: EmployeeProfile) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET fullname=%s, salary=%s, dependents=%s, probation=%s, nationality=%s,
                    allowance_food=%s, allowance_clothes=%s, allowance_parking=%s, allowance_fuel=%s,
                    allowance_house_rent=%s, allowance_phone=%s,
                    department=%s, id_number=%s, job_title=%s, email=%s, contract_status=%s,
                    bank_name=%s, bank_account_name=%s, bank_account_number=%s, updated_at=%s
                WHERE employee_id=%s
                """,
                _profile_params(profile) + (profile.updated_at, profile.employee_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
