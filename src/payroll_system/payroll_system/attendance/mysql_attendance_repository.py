from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import DuplicateKeyError, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in_time, check_in_notes,
    check_out_time, check_out_notes, working_hours, overtime_hours, status
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        check_in_notes=r.get("check_in_notes") or "",
        check_out_notes=r.get("check_out_notes") or "",
        working_hours=float(r.get("working_hours") or 0),
        overtime_hours=float(r.get("overtime_hours") or 0),
        status=AttendanceStatus(r["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Attendance ledger on MySQL.

    ``uq_attendance_open (employee_id, open_marker)`` makes opening a second
    record for the same employee fail at the storage layer.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_open_for_employee(self, employee_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND open_marker=1",
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_latest_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        notes: str = "",
    ) -> Optional[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, check_in_time, check_in_notes, status, open_marker, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,1,%s)
                    """,
                    (int(employee_id), work_date, check_in_time, notes, AttendanceStatus.INCOMPLETE.value, now_local()),
                )
                new_id = int(cur.lastrowid)
        except DuplicateKeyError:
            return None

        return AttendanceRecord(
            attendance_id=new_id,
            employee_id=int(employee_id),
            work_date=work_date,
            check_in_time=check_in_time,
            check_in_notes=notes,
        )

    def close_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        notes: str,
        working_hours: float,
        overtime_hours: float,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_notes=%s, working_hours=%s, overtime_hours=%s,
                    status=%s, open_marker=NULL, updated_at=%s
                WHERE attendance_id=%s AND open_marker=1
                """,
                (
                    check_out_time,
                    notes,
                    working_hours,
                    overtime_hours,
                    AttendanceStatus.PRESENT.value,
                    now_local(),
                    int(attendance_id),
                ),
            )
            if cur.rowcount == 0:
                return None
        return self.get_by_id(attendance_id)

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY check_in_time DESC",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_in_range(self, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date, employee_id
                """,
                (start_date, end_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def delete_by_id(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
