from __future__ import annotations

from src.turno_system.turno_system.database.bootstrap import (
    _iter_sql_statements,
    _strip_create_db_and_use,
    default_schema_path,
)


def test_splitter_ignores_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES('a;b');\nINSERT INTO t VALUES(\"c;d\");\nSELECT 1"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES('a;b')",
        'INSERT INTO t VALUES("c;d")',
        "SELECT 1",
    ]


def test_create_database_and_use_are_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS foo;\nUSE foo;\nCREATE TABLE x (id INT);"
    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE x (id INT)"]


def test_bundled_schema_defines_turnos_table():
    sql = _strip_create_db_and_use(default_schema_path().read_text(encoding="utf-8"))
    statements = list(_iter_sql_statements(sql))
    assert any("CREATE TABLE IF NOT EXISTS turnos" in s for s in statements)
