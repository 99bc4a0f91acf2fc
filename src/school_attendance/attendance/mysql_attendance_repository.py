from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import SubjectType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, record_from_row, record_to_row
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, subject_type, subject_id, group_id, work_date,
    check_in_time, check_out_time, status, method, verified, auto_marked
"""


def _from_db(r: dict) -> AttendanceRecord:
    # DATETIME columns hold naive UTC.
    row = dict(r)
    row["check_in_time"] = from_utc_naive(row.get("check_in_time"))
    row["check_out_time"] = from_utc_naive(row.get("check_out_time"))
    return record_from_row(row)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_subject_and_date(
        self, subject_type: SubjectType, subject_id: str, work_date: date
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE subject_type=%s AND subject_id=%s AND work_date=%s
                """,
                (subject_type.value, subject_id, work_date),
            )
            r = fetchone(cur)
            return _from_db(r) if r else None

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _from_db(r) if r else None

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        row = record_to_row(record)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    subject_type, subject_id, group_id, work_date,
                    check_in_time, check_out_time, status, method, verified, auto_marked
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    row["subject_type"],
                    row["subject_id"],
                    row["group_id"],
                    row["work_date"],
                    to_utc_naive(row["check_in_time"]) if row["check_in_time"] else None,
                    to_utc_naive(row["check_out_time"]) if row["check_out_time"] else None,
                    row["status"],
                    row["method"],
                    int(row["verified"]),
                    int(row["auto_marked"]),
                ),
            )
            return replace(record, record_id=int(cur.lastrowid))

    def mark_checked_out(self, *, record_id: int, check_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s
                WHERE record_id=%s
                  AND check_in_time IS NOT NULL
                  AND check_out_time IS NULL
                  AND status <> 'absent'
                """,
                (to_utc_naive(check_out_time), int(record_id)),
            )
            return cur.rowcount > 0

    def list_for_date(
        self, subject_type: SubjectType, work_date: date, *, group_id: Optional[str] = None
    ) -> Sequence[AttendanceRecord]:
        return self.list_in_range(
            start_date=work_date,
            end_date=work_date,
            subject_type=subject_type,
            group_id=group_id,
        )

    def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        subject_type: Optional[SubjectType] = None,
        subject_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if subject_type is not None:
            clauses.append("subject_type=%s")
            params.append(subject_type.value)
        if subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(subject_id)
        if group_id is not None:
            clauses.append("group_id=%s")
            params.append(group_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date ASC, subject_type ASC, subject_id ASC
                """,
                tuple(params),
            )
            return [_from_db(r) for r in fetchall(cur)]
