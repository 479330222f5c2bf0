from src.payroll_system.payroll_system.database.bootstrap import split_statements


def test_split_statements_skips_database_lines_and_comments():
    sql = """
    CREATE DATABASE IF NOT EXISTS payroll_db;
    USE payroll_db;
    -- employees first
    CREATE TABLE a (id INT);
    CREATE TABLE b (id INT)
    """

    assert list(split_statements(sql)) == ["CREATE TABLE a (id INT)", "CREATE TABLE b (id INT)"]


def test_semicolons_inside_literals_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b', 'it''s');INSERT INTO t VALUES (\"x;y\");"

    assert list(split_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b', 'it''s')",
        'INSERT INTO t VALUES ("x;y")',
    ]
