from __future__ import annotations

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status

from ..repositories import Repository, StorageError
from ..schemas import ErrorOut, MessageOut, TodoCreate, TodoOut, TodoStats, TodoToggle
from ..utils import todo_stats

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
)

NOT_FOUND = "Todo not found"

# Ids are SERIAL (int4) columns.
TodoId = Annotated[int, Path(ge=-(2**31), le=2**31 - 1)]


# PUBLIC_INTERFACE
def get_repository(request: Request) -> Repository:
    """
    Dependency returning the repository owned by the running application.
    """
    return request.app.state.repository


def _storage_failure(message: str) -> HTTPException:
    logger.exception(message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="List all todos, newest first.",
    responses={500: {"model": ErrorOut, "description": "Storage error"}},
)
async def list_todos(repo: Repository = Depends(get_repository)) -> List[TodoOut]:
    """
    List every todo ordered by creation time, descending.
    """
    try:
        items = await repo.list()
    except StorageError:
        raise _storage_failure("Failed to fetch todos")
    return [TodoOut(**it) for it in items]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item from a non-blank title and return the stored row.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"model": ErrorOut, "description": "Title missing, blank or not a string"},
        500: {"model": ErrorOut, "description": "Storage error"},
    },
)
async def create_todo(payload: TodoCreate, repo: Repository = Depends(get_repository)) -> TodoOut:
    """
    Create a new Todo. The title arrives already trimmed by the schema.
    """
    try:
        created = await repo.create(payload.title)
    except StorageError:
        raise _storage_failure("Failed to create todo")
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=TodoStats,
    summary="Todo Stats",
    description="Totals of all, completed and pending todos plus the completion rate.",
    responses={500: {"model": ErrorOut, "description": "Storage error"}},
)
async def get_stats(repo: Repository = Depends(get_repository)) -> TodoStats:
    try:
        items = await repo.list()
    except StorageError:
        raise _storage_failure("Failed to fetch todo stats")
    return TodoStats(**todo_stats(items))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Toggle Todo",
    description="Set the completion flag of a Todo item.",
    responses={
        200: {"description": "Todo updated"},
        400: {"model": ErrorOut, "description": "Invalid id or completed flag"},
        404: {"model": ErrorOut, "description": "Todo not found"},
        500: {"model": ErrorOut, "description": "Storage error"},
    },
)
async def toggle_todo(
    todo_id: TodoId, payload: TodoToggle, repo: Repository = Depends(get_repository)
) -> TodoOut:
    """
    Update `completed` on the matching row. A missing row is reported from
    the empty result of the update itself.
    """
    try:
        updated = await repo.set_completed(todo_id, payload.completed)
    except StorageError:
        raise _storage_failure("Failed to update todo")
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return TodoOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageOut,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={
        200: {"description": "Todo deleted"},
        400: {"model": ErrorOut, "description": "Invalid id"},
        404: {"model": ErrorOut, "description": "Todo not found"},
        500: {"model": ErrorOut, "description": "Storage error"},
    },
)
async def delete_todo(todo_id: TodoId, repo: Repository = Depends(get_repository)) -> MessageOut:
    """
    Delete a Todo. Returns a confirmation message, 404 if not found.
    """
    try:
        deleted = await repo.delete(todo_id)
    except StorageError:
        raise _storage_failure("Failed to delete todo")
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return MessageOut(message="Todo deleted successfully")
