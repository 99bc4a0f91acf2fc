from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..common.deadline import check_deadline, current_deadline
from ..core.exceptions import DuplicateRecord, OperationTimeout, StorageError
from .connection import DatabaseConnection

# ER_QUERY_TIMEOUT: statement interrupted by max_execution_time.
_QUERY_TIMEOUT = 3024


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, roll back on any error.

    Connector errors are translated into the domain taxonomy: a unique-key
    violation becomes ``DuplicateRecord``, anything else ``StorageError``.
    Under an active caller deadline, SELECTs are capped by the remaining
    budget and the transaction is only committed while budget is left.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            _limit_statement_time(cur)
            yield conn, cur
            check_deadline("commit")
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateRecord("A record already exists for this key") from exc
        raise StorageError(f"Database integrity error: {exc.msg}") from exc
    except mysql.connector.Error as exc:
        conn.rollback()
        if exc.errno == _QUERY_TIMEOUT:
            raise OperationTimeout("Attendance request timed out during a storage call; nothing was recorded") from exc
        raise StorageError(f"Database error: {exc.msg}") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _limit_statement_time(cur) -> None:
    deadline = current_deadline()
    remaining = deadline.remaining() if deadline else None
    if remaining is None:
        return
    # max_execution_time is in milliseconds and 0 would mean "no limit".
    cur.execute("SET SESSION max_execution_time=%s", (max(1, int(remaining * 1000)),))


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60, second=total_seconds % 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def decode_json_column(value: Any) -> Any:
    """JSON columns come back as str or bytes depending on the connector build."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value
