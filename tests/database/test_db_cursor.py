from __future__ import annotations

import mysql.connector
import pytest

from school_attendance.common.deadline import Deadline
from school_attendance.core.exceptions import DuplicateRecord, OperationTimeout, StorageError
from school_attendance.database.connection import DatabaseConnection, DBConfig
from school_attendance.database.mysql_base import db_cursor


class FakeCursor:
    def __init__(self):
        self.statements: list = []
        self.closed = False

    def execute(self, sql, params=None):
        self.statements.append((sql, params))

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.cursor_obj = FakeCursor()
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
    def __init__(self):
        self.conn = FakeConnection()

    def connect(self):
        return self.conn


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_commits_without_a_deadline():
    factory = FakeFactory()

    with db_cursor(factory) as (_, cur):
        cur.execute("INSERT INTO t VALUES (1)")

    assert factory.conn.committed
    assert factory.conn.closed
    assert cur.statements == [("INSERT INTO t VALUES (1)", None)]


def test_active_deadline_caps_statement_time():
    factory = FakeFactory()
    clock = FakeClock()

    with Deadline(1.5, clock=clock).active():
        with db_cursor(factory) as (_, cur):
            cur.execute("SELECT 1")

    sql, params = cur.statements[0]
    assert sql.startswith("SET SESSION max_execution_time")
    assert params == (1500,)
    assert factory.conn.committed


def test_budget_spent_before_commit_rolls_back():
    factory = FakeFactory()
    clock = FakeClock()

    with Deadline(1, clock=clock).active():
        with pytest.raises(OperationTimeout):
            with db_cursor(factory) as (_, cur):
                cur.execute("INSERT INTO t VALUES (1)")
                clock.now = 2.0

    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.conn.closed


def test_statement_timeout_maps_to_operation_timeout():
    factory = FakeFactory()

    with pytest.raises(OperationTimeout):
        with db_cursor(factory):
            raise mysql.connector.Error(msg="Query execution was interrupted", errno=3024)

    assert factory.conn.rolled_back


def test_duplicate_key_maps_to_duplicate_record():
    factory = FakeFactory()

    with pytest.raises(DuplicateRecord):
        with db_cursor(factory):
            raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062)


def test_other_connector_errors_are_storage_errors():
    factory = FakeFactory()

    with pytest.raises(StorageError):
        with db_cursor(factory):
            raise mysql.connector.Error(msg="Lost connection", errno=2013)


def test_connect_timeout_follows_the_deadline():
    connection = DatabaseConnection(
        DBConfig(host="localhost", port=3306, user="root", password="", database="x", connection_timeout=10)
    )
    clock = FakeClock()

    assert connection._connect_timeout() == 10
    with Deadline(2.5, clock=clock).active():
        assert connection._connect_timeout() == 3
    with Deadline(60, clock=clock).active():
        assert connection._connect_timeout() == 10


def test_connect_refuses_once_the_budget_is_spent():
    connection = DatabaseConnection(
        DBConfig(host="localhost", port=3306, user="root", password="", database="x")
    )

    with Deadline(0).active():
        with pytest.raises(OperationTimeout):
            connection.connect()
