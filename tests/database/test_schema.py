from __future__ import annotations

from pathlib import Path

import school_attendance
from school_attendance.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use
from school_attendance.main import SCHEMA_PATH


def test_schema_ships_inside_the_package():
    assert SCHEMA_PATH.is_file()
    assert Path(school_attendance.__file__).resolve().parent in SCHEMA_PATH.parents


def test_schema_creates_every_table():
    sql = _strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))
    statements = list(_iter_sql_statements(sql))

    for table in ("students", "staff", "attendance_records", "sweep_locks", "attendance_settings", "school_location"):
        assert any(f"CREATE TABLE IF NOT EXISTS {table} " in s for s in statements), table
