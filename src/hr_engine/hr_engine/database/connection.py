from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


@dataclass
class Transaction:
    conn: Any
    cur: Any


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: Outside of `transaction()` we create short-lived connections per
    operation. Inside it, every repository call joins the same connection so a
    multi-row use case commits or rolls back as one unit.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._active: ContextVar[Optional[Transaction]] = ContextVar(f"hr_engine_tx_{id(self)}", default=None)

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
        )

    def active_transaction(self) -> Optional[Transaction]:
        return self._active.get()

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Unit of work: commit on normal exit, rollback on any exception.

        Nested calls join the outermost transaction.
        """

        current = self._active.get()
        if current is not None:
            yield current
            return

        conn = self.connect()
        try:
            conn.start_transaction()
            cur = conn.cursor(dictionary=True)
            tx = Transaction(conn=conn, cur=cur)
            token = self._active.set(tx)
            try:
                yield tx
                conn.commit()
            except BaseException:
                conn.rollback()
                raise
            finally:
                self._active.reset(token)
                cur.close()
        finally:
            conn.close()
