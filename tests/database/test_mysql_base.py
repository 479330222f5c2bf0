from __future__ import annotations

from datetime import date, datetime

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.payroll_system.payroll_system.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.payroll_system.payroll_system.core.exceptions import StorageError
from src.payroll_system.payroll_system.database.mysql_base import DuplicateKeyError, db_cursor


class FakeCursor:
    def __init__(self, error=None):
        self._error = error
        self.closed = False
        self.lastrowid = 1

    def execute(self, sql, params=None):
        if self._error:
            raise self._error

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, error=None):
        self.cursor_obj = FakeCursor(error)
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, connect_error=None):
        self.conn = conn
        self._connect_error = connect_error

    def connect(self):
        if self._connect_error:
            raise self._connect_error
        return self.conn


def test_commit_on_success():
    conn = FakeConnection()

    with db_cursor(FakeFactory(conn)) as (_, cur):
        cur.execute("SELECT 1")

    assert conn.committed and conn.closed and conn.cursor_obj.closed


def test_duplicate_key_is_reported_as_duplicate():
    conn = FakeConnection(mysql.connector.IntegrityError(msg="dup", errno=errorcode.ER_DUP_ENTRY))

    with pytest.raises(DuplicateKeyError):
        with db_cursor(FakeFactory(conn)) as (_, cur):
            cur.execute("INSERT ...")

    assert conn.rolled_back and conn.closed


def test_driver_errors_become_storage_errors():
    conn = FakeConnection(mysql.connector.ProgrammingError(msg="bad sql", errno=1064))

    with pytest.raises(StorageError):
        with db_cursor(FakeFactory(conn)) as (_, cur):
            cur.execute("SELEC 1")

    assert conn.rolled_back


def test_connection_failure_is_a_storage_error():
    factory = FakeFactory(connect_error=mysql.connector.InterfaceError(msg="down", errno=2003))

    with pytest.raises(StorageError):
        with db_cursor(factory):
            pass


def test_second_open_attendance_is_rejected_by_unique_key():
    conn = FakeConnection(mysql.connector.IntegrityError(msg="dup", errno=errorcode.ER_DUP_ENTRY))
    repo = MySQLAttendanceRepository(FakeFactory(conn))

    created = repo.create_checkin(employee_id=1, work_date=date(2024, 3, 4), check_in_time=datetime(2024, 3, 4, 8))

    assert created is None
