from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Sequence

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

PAYROLL_TABLES = ("employees", "attendance_records", "salary_records")

_DATABASE_LINE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
# quoted literals are matched whole so a ';' inside them never ends a statement
_TOKEN = re.compile(r"'(?:\\.|''|[^'\\])*'|\"(?:\\.|[^\"\\])*\"|;|[^'\";]+", re.S)


def split_statements(sql: str) -> Iterator[str]:
    """Yield the statements of a schema or seed script.

    ``--`` comment lines and any CREATE DATABASE / USE line are dropped, so
    the script always runs against the configured database.
    """
    body = "\n".join(ln for ln in sql.splitlines() if not ln.lstrip().startswith("--"))
    body = _DATABASE_LINE.sub("", body)

    current: list[str] = []
    for token in _TOKEN.findall(body):
        if token == ";":
            statement = "".join(current).strip()
            current = []
            if statement:
                yield statement
        else:
            current.append(token)

    statement = "".join(current).strip()
    if statement:
        yield statement


def _server_connection(target: DBConfig, *, select_database: bool = True):
    options = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
    }
    if select_database:
        options["database"] = target.database
    return mysql.connector.connect(**options)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _server_connection(target, select_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def run_sql_file(db_config: dict, path: str | Path) -> int:
    """Execute every statement of ``path`` in one transaction; returns the statement count."""
    statements = list(split_statements(Path(path).read_text(encoding="utf-8")))
    conn = _server_connection(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
    except mysql.connector.Error:
        conn.rollback()
        logger.exception("[database] failed while running %s", path)
        raise
    finally:
        conn.close()
    return len(statements)


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = run_sql_file(db_config, schema_path)
    logger.info("[database] schema: %s statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = run_sql_file(db_config, seed_path)
    logger.info("[database] seed: %s statements from %s", count, seed_path)


def list_tables(db_config: dict) -> list[str]:
    conn = _server_connection(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(str(row[0]) for row in cur.fetchall())
    finally:
        conn.close()


def missing_tables(db_config: dict, required: Sequence[str] = PAYROLL_TABLES) -> list[str]:
    present = set(list_tables(db_config))
    return [name for name in required if name not in present]
