from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import SubjectType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SweepLock
from .repository import SweepLockRepository


class MySQLSweepLockRepository(SweepLockRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, work_date: date, scope: SubjectType) -> Optional[SweepLock]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT work_date, scope, completed_at, run_by
                FROM sweep_locks
                WHERE work_date=%s AND scope=%s
                """,
                (work_date, scope.value),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SweepLock(
                work_date=r["work_date"],
                scope=SubjectType(r["scope"]),
                completed_at=from_utc_naive(r["completed_at"]),
                run_by=r.get("run_by"),
            )

    def upsert(self, lock: SweepLock) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sweep_locks(work_date, scope, completed_at, run_by)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE completed_at=VALUES(completed_at), run_by=VALUES(run_by)
                """,
                (lock.work_date, lock.scope.value, to_utc_naive(lock.completed_at), lock.run_by),
            )
