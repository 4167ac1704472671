"""
Domain errors raised by the persistence service.

The service never produces HTTP responses; the application's exception
handlers translate these into status codes (NotFoundError -> 404,
PersistenceError -> 500).
"""
from __future__ import annotations

from typing import Iterable, Tuple


class TodoError(Exception):
    """Base class for errors raised by TodoService."""


# PUBLIC_INTERFACE
class NotFoundError(TodoError):
    """
    A mutation matched zero rows.

    Attributes:
        ids: The ids the caller asked to update or delete.
    """

    def __init__(self, ids: Iterable[int]) -> None:
        self.ids: Tuple[int, ...] = tuple(ids)
        super().__init__(f"todo not found: ids={list(self.ids)}")


# PUBLIC_INTERFACE
class PersistenceError(TodoError):
    """Any other storage failure. The original exception is kept as __cause__."""
