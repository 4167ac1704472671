from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Domain representation of a persisted TODO row.

    Fields:
    - id: Store-assigned integer identifier, never reused
    - subject: Non-empty short text
    - description: Free text, may be empty
    - created_at: UTC timestamp set by the store on insert
    - updated_at: UTC timestamp refreshed by the store on every update
    """

    id: int
    subject: str
    description: str
    created_at: datetime
    updated_at: datetime
