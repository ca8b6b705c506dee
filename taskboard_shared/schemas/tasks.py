"""Task-related Pydantic schemas for shared use across server and client."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from .common import CamelModel, TaskPriority

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
CATEGORY_MAX_LENGTH = 50

UNCATEGORIZED = "Uncategorized"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to an aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------

class TaskBase(CamelModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: TaskPriority = TaskPriority.MEDIUM
    category: Optional[str] = Field(default=None, max_length=CATEGORY_MAX_LENGTH)
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class TaskCreate(TaskBase):
    """Request body for POST /tasks. Server-owned fields (id, createdAt, ...) are ignored."""


class TaskUpdate(TaskBase):
    """Request body for PUT /tasks/{id}: the full task, id included."""
    id: int
    is_completed: bool = False


class TaskRead(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    is_completed: bool = False
    created_at: datetime
    completed_at: Optional[datetime] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    category: Optional[str] = None
    due_date: Optional[datetime] = None

    # SQLite hands timestamps back naive; they were stored as UTC.
    @field_validator("created_at", "completed_at", "due_date")
    @classmethod
    def timestamps_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

class TaskStats(CamelModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    completion_rate: float = 0
