from __future__ import annotations

import os
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator

from .logger import get_logger

logger = get_logger(__name__)

# Millisecond-resolution UTC timestamp.
NOW_SQL = "STRFTIME('%Y-%m-%d %H:%M:%f', 'now')"
# At least one millisecond past the previous value, so every update advances updated_at.
TOUCH_SQL = (
    "STRFTIME('%Y-%m-%d %H:%M:%f', "
    "MAX(JULIANDAY('now'), JULIANDAY(OLD.updated_at) + 1.0 / 86400000))"
)
# Virtual machine instructions between deadline checks.
_PROGRESS_STEPS = 1000
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    subject: str = "subject"
    description: str = "description"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


COLS = _Cols()


class Database:
    """
    Owns the SQLite file and hands out one connection per operation.

    Connections are never shared between operations, so concurrent requests
    served from the threadpool do not contend on a cursor. Writes open with
    BEGIN IMMEDIATE, so competing writers wait on the busy timeout instead of
    failing on a lock upgrade.

    operation_timeout bounds how long one connection may run statements; when
    it expires SQLite interrupts the statement with OperationalError. 0 disables it.
    """

    def __init__(self, db_path: str, timeout: float = 5.0, operation_timeout: float = 0.0) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._timeout = timeout
        self._operation_timeout = operation_timeout
        self._init_db()

    @property
    def path(self) -> str:
        return self._db_path

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection; commit on success, roll back on error, always close."""
        conn = sqlite3.connect(self._db_path, timeout=self._timeout, isolation_level="IMMEDIATE")
        conn.row_factory = sqlite3.Row
        if self._operation_timeout > 0:
            deadline = time.monotonic() + self._operation_timeout
            conn.set_progress_handler(lambda: time.monotonic() > deadline, _PROGRESS_STEPS)
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self.connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {COLS.table} (
                    {COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {COLS.subject} TEXT NOT NULL CHECK ({COLS.subject} <> ''),
                    {COLS.description} TEXT NOT NULL DEFAULT '',
                    {COLS.created_at} TEXT NOT NULL DEFAULT ({NOW_SQL}),
                    {COLS.updated_at} TEXT NOT NULL DEFAULT ({NOW_SQL})
                )
                """
            )
            conn.execute(f"DROP TRIGGER IF EXISTS trigger_{COLS.table}_{COLS.updated_at}")
            conn.execute(
                f"""
                CREATE TRIGGER trigger_{COLS.table}_{COLS.updated_at}
                AFTER UPDATE ON {COLS.table}
                BEGIN
                    UPDATE {COLS.table} SET {COLS.updated_at} = {TOUCH_SQL}
                    WHERE {COLS.id} = NEW.{COLS.id};
                END
                """
            )
        logger.info("db.initialized", path=self._db_path)
