from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

# Matches the VARCHAR bound of the todos.title column.
TITLE_MAX_LENGTH = 255


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy milk"}})

    title: StrictStr = Field(..., description="Short title for the todo item")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and reject blank or over-long titles.
        """
        s = v.strip()
        if not s:
            raise ValueError("Title is required")
        if len(s) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
        return s


# PUBLIC_INTERFACE
class TodoToggle(BaseModel):
    """
    Schema for setting the completion flag of an existing Todo item.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"completed": True}})

    completed: StrictBool = Field(..., description="New completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy milk",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")


class TodoStats(BaseModel):
    """Summary counts over all todos."""

    total: int = Field(..., description="Number of todos")
    completed: int = Field(..., description="Number of completed todos")
    pending: int = Field(..., description="Number of todos not yet completed")
    completion_rate: int = Field(..., description="Completed share in percent, rounded")


class MessageOut(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str


class HealthOut(BaseModel):
    """
    Connectivity report for the storage backend.
    """

    status: str = Field(..., description="'healthy' or 'unhealthy'")
    database: str = Field(..., description="'connected' or 'disconnected'")
    timestamp: datetime = Field(..., description="Time of the check (UTC)")
    error: Optional[str] = Field(default=None, description="Failure reason when unhealthy")
