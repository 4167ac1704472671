from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Iterable, List

from .db import COLS, TIMESTAMP_FORMAT, Database
from .errors import NotFoundError, PersistenceError
from .logger import get_logger
from .models import TodoEntity

logger = get_logger(__name__)

_SELECT_COLUMNS = (
    f"{COLS.id}, {COLS.subject}, {COLS.description}, {COLS.created_at}, {COLS.updated_at}"
)
_CONFIRM_SQL = f"SELECT {_SELECT_COLUMNS} FROM {COLS.table} WHERE {COLS.id} = ?"


def _parse_ts(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def _row_to_entity(row: sqlite3.Row) -> TodoEntity:
    return {
        "id": int(row[COLS.id]),
        "subject": str(row[COLS.subject]),
        "description": str(row[COLS.description]),
        "created_at": _parse_ts(row[COLS.created_at]),
        "updated_at": _parse_ts(row[COLS.updated_at]),
    }


# PUBLIC_INTERFACE
class TodoService:
    """
    CRUD of TODO entities on top of a Database.

    Every SQL statement for the entity lives here. Storage failures surface as
    PersistenceError, zero-row mutations as NotFoundError.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(self, subject: str, description: str) -> TodoEntity:
        """Insert a TODO and return it as re-read from the store."""
        try:
            with self._db.connect() as conn:
                cur = conn.execute(
                    f"INSERT INTO {COLS.table} ({COLS.subject}, {COLS.description}) VALUES (?, ?)",
                    (subject, description),
                )
                new_id = cur.lastrowid
                row = conn.execute(_CONFIRM_SQL, (new_id,)).fetchone()
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError("failed to create todo") from exc
        if row is None:
            raise PersistenceError(f"created todo {new_id} could not be read back")

        todo = _row_to_entity(row)
        logger.info("todo.created", todo_id=todo["id"])
        return todo

    def read(self, prev_id: int, size: int) -> List[TodoEntity]:
        """
        Return TODOs newest first.

        prev_id == 0 starts at the newest row, otherwise only ids strictly
        below prev_id qualify. size == 0 means no limit.
        """
        # SQLite treats a negative LIMIT as unbounded.
        limit = -1 if size == 0 else size
        if prev_id == 0:
            sql = f"SELECT {_SELECT_COLUMNS} FROM {COLS.table} ORDER BY {COLS.id} DESC LIMIT ?"
            params: tuple = (limit,)
        else:
            sql = (
                f"SELECT {_SELECT_COLUMNS} FROM {COLS.table} WHERE {COLS.id} < ? "
                f"ORDER BY {COLS.id} DESC LIMIT ?"
            )
            params = (prev_id, limit)

        try:
            with self._db.connect() as conn:
                rows = conn.execute(sql, params).fetchall()
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError("failed to read todos") from exc
        return [_row_to_entity(r) for r in rows]

    def update(self, todo_id: int, subject: str, description: str) -> TodoEntity:
        """Overwrite subject and description; the store refreshes updated_at."""
        try:
            with self._db.connect() as conn:
                cur = conn.execute(
                    f"UPDATE {COLS.table} SET {COLS.subject} = ?, {COLS.description} = ? "
                    f"WHERE {COLS.id} = ?",
                    (subject, description, todo_id),
                )
                if cur.rowcount == 0:
                    raise NotFoundError([todo_id])
                row = conn.execute(_CONFIRM_SQL, (todo_id,)).fetchone()
        except NotFoundError:
            logger.info("todo.not_found", op="update", ids=[todo_id])
            raise
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError(f"failed to update todo {todo_id}") from exc
        if row is None:
            raise PersistenceError(f"updated todo {todo_id} could not be read back")

        logger.info("todo.updated", todo_id=todo_id)
        return _row_to_entity(row)

    def delete(self, ids: Iterable[int]) -> None:
        """
        Delete every row whose id is in ids, in one statement.

        Succeeds if at least one row was removed. An empty ids is a no-op and
        never opens a connection.
        """
        unique_ids = sorted(set(ids))
        if not unique_ids:
            return

        placeholders = ",".join("?" for _ in unique_ids)
        try:
            with self._db.connect() as conn:
                cur = conn.execute(
                    f"DELETE FROM {COLS.table} WHERE {COLS.id} IN ({placeholders})",
                    unique_ids,
                )
                deleted = cur.rowcount
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError("failed to delete todos") from exc

        if deleted == 0:
            logger.info("todo.not_found", op="delete", ids=unique_ids)
            raise NotFoundError(unique_ids)
        logger.info("todo.deleted", requested=len(unique_ids), deleted=deleted)
