"""
Task service layer: queries and commands over the tasks table.

Handles:
- Filtered listing (newest first) and single-task lookup
- Create / full-replace update / delete with write-time constraint checks
- The completion timestamp rule (completed_at is set on false -> true and
  cleared whenever a task is saved as not completed)
- Aggregates: distinct categories and completion stats
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import MismatchError, NotFoundError, ValidationError
from app.models.base import utcnow
from app.models.task import Task
from taskboard_shared.schemas.common import TaskPriority
from taskboard_shared.schemas.tasks import (
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TaskCreate,
    TaskStats,
    TaskUpdate,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


# Ids are 32-bit INTEGER primary keys; anything outside cannot exist.
MAX_TASK_ID = 2**31 - 1

_LENGTH_LIMITS = {
    "title": TITLE_MAX_LENGTH,
    "description": DESCRIPTION_MAX_LENGTH,
    "category": CATEGORY_MAX_LENGTH,
}


def check_task_constraints(task: Task) -> None:
    """Enforce required/length constraints before a row is written."""
    if not task.title or not task.title.strip():
        raise ValidationError("Title is required", field="title")
    for name, limit in _LENGTH_LIMITS.items():
        value = getattr(task, name)
        if value is not None and len(value) > limit:
            raise ValidationError(
                f"{name.capitalize()} must be at most {limit} characters",
                field=name,
            )
    if task.priority not in {p.value for p in TaskPriority}:
        raise ValidationError(f"Unknown priority {task.priority}", field="priority")


async def get_task_or_404(session: AsyncSession, task_id: int) -> Task:
    task = None
    if 1 <= task_id <= MAX_TASK_ID:
        task = await session.get(Task, task_id)
    if not task:
        raise NotFoundError(f"Task with ID {task_id} not found.")
    return task


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_tasks(
    session: AsyncSession,
    is_completed: Optional[bool] = None,
    category: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
) -> list[Task]:
    """All tasks matching every given filter, newest first."""
    stmt = select(Task)

    if is_completed is not None:
        stmt = stmt.where(Task.is_completed == is_completed)
    if category:
        stmt = stmt.where(Task.category == category)
    if priority is not None:
        stmt = stmt.where(Task.priority == int(priority))

    stmt = stmt.order_by(Task.created_at.desc(), Task.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_categories(session: AsyncSession) -> list[str]:
    """Distinct non-empty categories in ordinal (case-sensitive) order."""
    stmt = (
        select(Task.category)
        .where(Task.category.is_not(None), Task.category != "")
        .distinct()
    )
    result = await session.execute(stmt)
    # Sorted here so the order does not depend on the database collation.
    return sorted(row[0] for row in result.all())


async def compute_stats(session: AsyncSession) -> TaskStats:
    total = await session.scalar(select(func.count()).select_from(Task)) or 0
    completed = await session.scalar(
        select(func.count()).select_from(Task).where(Task.is_completed == True)  # noqa: E712
    ) or 0

    rate = round(completed / total * 100, 1) if total > 0 else 0
    return TaskStats(
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=total - completed,
        completion_rate=rate,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def create_task(session: AsyncSession, task_in: TaskCreate) -> Task:
    task = Task(
        title=task_in.title,
        description=task_in.description,
        is_completed=False,
        completed_at=None,
        created_at=utcnow(),
        priority=int(task_in.priority),
        category=task_in.category,
        due_date=task_in.due_date,
    )
    check_task_constraints(task)
    session.add(task)
    await session.flush()
    return task


async def update_task(session: AsyncSession, task_id: int, task_in: TaskUpdate) -> Task:
    """Replace every editable field of a task; id and created_at are kept."""
    if task_in.id != task_id:
        raise MismatchError("Task ID mismatch.", field="id")

    task = await get_task_or_404(session, task_id)

    was_completed = task.is_completed
    task.title = task_in.title
    task.description = task_in.description
    task.is_completed = task_in.is_completed
    task.priority = int(task_in.priority)
    task.category = task_in.category
    task.due_date = task_in.due_date

    if task_in.is_completed and not was_completed:
        task.completed_at = utcnow()
    elif not task_in.is_completed:
        task.completed_at = None

    check_task_constraints(task)
    session.add(task)
    await session.flush()
    return task


async def delete_task(session: AsyncSession, task_id: int) -> Task:
    task = await get_task_or_404(session, task_id)
    await session.delete(task)
    await session.flush()
    return task
