from __future__ import annotations

from datetime import datetime
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Ids and cursors are SQLite INTEGERs.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
Int64 = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


def _require_subject(v: str) -> str:
    if v == "":
        raise ValueError("subject must not be empty")
    return v


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a TODO item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "subject": "buy milk",
                "description": "",
                "created_at": "2025-01-25T10:15:30.123000Z",
                "updated_at": "2025-01-25T10:15:30.123000Z",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    subject: str = Field(..., description="Short subject of the todo item")
    description: str = Field(..., description="Free-form description, possibly empty")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")


# PUBLIC_INTERFACE
class CreateTodoRequest(BaseModel):
    """
    Body of POST /todos.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"subject": "buy milk", "description": ""}}
    )

    subject: str = Field(
        default="", validate_default=True, description="Short subject; must not be empty"
    )
    description: str = Field(default="", description="Optional description")

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        return _require_subject(v)


# PUBLIC_INTERFACE
class UpdateTodoRequest(BaseModel):
    """
    Body of PUT /todos. Subject and description are both overwritten.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"id": 1, "subject": "buy milk and eggs", "description": ""}
        }
    )

    id: int = Field(
        default=0,
        ge=INT64_MIN,
        le=INT64_MAX,
        validate_default=True,
        description="Id of the todo to update; must not be 0",
    )
    subject: str = Field(
        default="", validate_default=True, description="New subject; must not be empty"
    )
    description: str = Field(default="", description="New description")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: int) -> int:
        if v == 0:
            raise ValueError("id must not be 0")
        return v

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        return _require_subject(v)


# PUBLIC_INTERFACE
class DeleteTodoRequest(BaseModel):
    """
    Body of DELETE /todos.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"ids": [1, 2, 3]}})

    ids: List[Int64] = Field(default_factory=list, description="Ids of the todos to delete")


# PUBLIC_INTERFACE
class CreateTodoResponse(BaseModel):
    todo: TodoOut


# PUBLIC_INTERFACE
class ReadTodoResponse(BaseModel):
    todos: List[TodoOut] = Field(..., description="Todos ordered by id, newest first")


# PUBLIC_INTERFACE
class UpdateTodoResponse(BaseModel):
    todo: TodoOut


# PUBLIC_INTERFACE
class DeleteTodoResponse(BaseModel):
    """Empty object on success."""
