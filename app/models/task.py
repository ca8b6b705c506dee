"""Task model."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from taskboard_shared.schemas.common import TaskPriority
from taskboard_shared.schemas.tasks import (
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)

from .base import CreatedAtMixin


class Task(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    is_completed: bool = Field(default=False, nullable=False, index=True)
    completed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    priority: int = Field(default=TaskPriority.MEDIUM.value, nullable=False)  # 1=low .. 4=critical
    category: Optional[str] = Field(default=None, max_length=CATEGORY_MAX_LENGTH, index=True)
    due_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
