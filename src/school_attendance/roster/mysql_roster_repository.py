from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SubjectType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_column, fetchall, fetchone
from .model import RosterEntry
from .repository import RosterRepository

# table, id column, group column
_TABLES = {
    SubjectType.STUDENT: ("students", "student_id", "class_id"),
    SubjectType.STAFF: ("staff", "staff_id", "department_id"),
}


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_subjects(self, scope: SubjectType, group_id: Optional[str] = None) -> Sequence[RosterEntry]:
        table, id_col, group_col = _TABLES[scope]
        clauses = ["is_active=1"]
        params: list[object] = []
        if group_id is not None:
            clauses.append(f"{group_col}=%s")
            params.append(group_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {id_col} AS subject_id, {group_col} AS group_id, full_name
                FROM {table}
                WHERE {" AND ".join(clauses)}
                ORDER BY {id_col}
                """,
                tuple(params),
            )
            return [
                RosterEntry(subject_id=str(r["subject_id"]), group_id=r.get("group_id"), full_name=r.get("full_name"))
                for r in fetchall(cur)
            ]

    def has_biometric_enrollment(self, subject_type: SubjectType, subject_id: str) -> bool:
        table, id_col, _ = _TABLES[subject_type]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT 1 AS enrolled
                FROM {table}
                WHERE {id_col}=%s AND (fingerprint_id IS NOT NULL OR face_embedding IS NOT NULL)
                """,
                (subject_id,),
            )
            return fetchone(cur) is not None

    def get_face_embedding(self, subject_type: SubjectType, subject_id: str) -> Optional[Sequence[float]]:
        table, id_col, _ = _TABLES[subject_type]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT face_embedding FROM {table} WHERE {id_col}=%s", (subject_id,))
            r = fetchone(cur)
            if not r:
                return None
            embedding = decode_json_column(r.get("face_embedding"))
            return [float(x) for x in embedding] if embedding else None
