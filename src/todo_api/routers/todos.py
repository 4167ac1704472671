from __future__ import annotations

import re

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..schemas import (
    INT64_MAX,
    INT64_MIN,
    CreateTodoRequest,
    CreateTodoResponse,
    DeleteTodoRequest,
    DeleteTodoResponse,
    ReadTodoResponse,
    TodoOut,
    UpdateTodoRequest,
    UpdateTodoResponse,
)
from ..service import TodoService

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

_INT_RE = re.compile(r"[+-]?[0-9]+")

_ERROR_RESPONSES = {
    400: {"description": "Malformed request"},
    500: {"description": "Persistence failure"},
}


def get_todo_service(request: Request) -> TodoService:
    """
    Return the TodoService built once in the application lifespan.
    """
    return request.app.state.todo_service


def _parse_int_param(name: str, raw: str) -> int:
    value = raw or "0"
    if not _INT_RE.fullmatch(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name} must be an integer",
        )
    parsed = int(value)
    if not INT64_MIN <= parsed <= INT64_MAX:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name} is out of range",
        )
    return parsed


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=CreateTodoResponse,
    summary="Create Todo",
    description="Create a new todo and return it as stored.",
    responses=_ERROR_RESPONSES,
)
def create_todo(
    payload: CreateTodoRequest, svc: TodoService = Depends(get_todo_service)
) -> CreateTodoResponse:
    """
    Create a new todo.
    """
    created = svc.create(payload.subject, payload.description)
    return CreateTodoResponse(todo=TodoOut(**created))


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ReadTodoResponse,
    summary="Read Todos",
    description=(
        "List todos newest first with cursor pagination.\n\n"
        "Query parameters:\n"
        "- prev_id: only return todos with an id below this one (0 = from the newest)\n"
        "- size: maximum number of todos to return (0 = no limit)"
    ),
    responses=_ERROR_RESPONSES,
)
def read_todos(
    prev_id: str = Query("0", description="Cursor: id of the last todo already seen"),
    size: str = Query("0", description="Page size; 0 means no limit"),
    svc: TodoService = Depends(get_todo_service),
) -> ReadTodoResponse:
    """
    Read a page of todos.
    """
    todos = svc.read(_parse_int_param("prev_id", prev_id), _parse_int_param("size", size))
    return ReadTodoResponse(todos=[TodoOut(**t) for t in todos])


# PUBLIC_INTERFACE
@router.put(
    "",
    response_model=UpdateTodoResponse,
    summary="Update Todo",
    description="Overwrite subject and description of an existing todo.",
    responses={**_ERROR_RESPONSES, 404: {"description": "Todo not found"}},
)
def update_todo(
    payload: UpdateTodoRequest, svc: TodoService = Depends(get_todo_service)
) -> UpdateTodoResponse:
    """
    Update a todo. NotFoundError from the service becomes a 404.
    """
    updated = svc.update(payload.id, payload.subject, payload.description)
    return UpdateTodoResponse(todo=TodoOut(**updated))


# PUBLIC_INTERFACE
@router.delete(
    "",
    response_model=DeleteTodoResponse,
    summary="Delete Todos",
    description=(
        "Delete every todo whose id is listed. Succeeds when at least one todo was "
        "removed; 404 when none of the ids exist. An empty list is a no-op."
    ),
    responses={**_ERROR_RESPONSES, 404: {"description": "None of the todos exist"}},
)
def delete_todos(
    payload: DeleteTodoRequest, svc: TodoService = Depends(get_todo_service)
) -> DeleteTodoResponse:
    """
    Delete todos by id.
    """
    svc.delete(payload.ids)
    return DeleteTodoResponse()
