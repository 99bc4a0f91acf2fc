from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Optional

import mysql.connector

from ..common.deadline import check_deadline, current_deadline
from ..core.exceptions import StorageError


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "school_attendance")),
            connection_timeout=int(db_config.get("connection_timeout", 10)),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation; the storage layer
    is the only shared mutable resource, so no connection is held across
    requests.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _connect_timeout(self) -> int:
        timeout = int(self._config.connection_timeout)
        deadline = current_deadline()
        remaining = deadline.remaining() if deadline else None
        if remaining is None:
            return timeout
        return max(1, min(timeout, math.ceil(remaining)))

    def connect(self):
        check_deadline("connect")
        try:
            return mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                connection_timeout=self._connect_timeout(),
            )
        except mysql.connector.Error as exc:
            raise StorageError(f"Database unavailable: {exc.msg}") from exc
