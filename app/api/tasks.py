"""
Task endpoints: CRUD plus the categories and stats aggregates.

- List is filterable by isCompleted, category and priority; newest first.
- PUT is a full replace and must carry the same id as the path.
- Every mutation writes an audit line with the task title.
"""

from __future__ import annotations

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.services.tasks import (
    compute_stats,
    create_task,
    delete_task,
    get_task_or_404,
    list_categories,
    list_tasks,
    update_task,
)
from taskboard_shared.schemas.common import ErrorResponse, TaskPriority
from taskboard_shared.schemas.tasks import TaskCreate, TaskRead, TaskStats, TaskUpdate

router = APIRouter()
log = structlog.get_logger()

_NOT_FOUND = {404: {"model": ErrorResponse}}
_BAD_REQUEST = {400: {"model": ErrorResponse}}


# ---------------------------------------------------------------------------
# Aggregates (registered before /{task_id} so the literal paths win)
# ---------------------------------------------------------------------------


@router.get("/categories", response_model=List[str])
async def list_categories_endpoint(session: AsyncSession = Depends(get_session)):
    """Distinct non-empty categories in ascending order."""
    return await list_categories(session)


@router.get("/stats", response_model=TaskStats)
async def task_stats_endpoint(session: AsyncSession = Depends(get_session)):
    """Total, completed and pending counts plus the completion rate in percent."""
    return await compute_stats(session)


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------


@router.get("", response_model=List[TaskRead], responses=_BAD_REQUEST)
async def list_tasks_endpoint(
    is_completed: Optional[bool] = Query(None, alias="isCompleted"),
    category: Optional[str] = None,
    priority: Optional[int] = Query(None, ge=1, le=4),
    session: AsyncSession = Depends(get_session),
):
    """List tasks with optional filters by completion, category, priority."""
    tasks = await list_tasks(
        session,
        is_completed=is_completed,
        category=category,
        priority=TaskPriority(priority) if priority is not None else None,
    )
    return [TaskRead.model_validate(t) for t in tasks]


@router.post("", response_model=TaskRead, status_code=201, responses=_BAD_REQUEST)
async def create_task_endpoint(
    task_in: TaskCreate,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Create a new task. Server-owned fields in the body are ignored."""
    task = await create_task(session, task_in)
    await session.commit()
    await session.refresh(task)

    log.info("Created new task", task_id=task.id, title=task.title)

    response.headers["Location"] = str(request.url_for("get_task_endpoint", task_id=task.id))
    return TaskRead.model_validate(task)


@router.get("/{task_id}", response_model=TaskRead, responses=_NOT_FOUND)
async def get_task_endpoint(
    task_id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get a single task."""
    task = await get_task_or_404(session, task_id)
    return TaskRead.model_validate(task)


@router.put(
    "/{task_id}",
    status_code=204,
    response_class=Response,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def update_task_endpoint(
    task_id: int,
    task_in: TaskUpdate,
    session: AsyncSession = Depends(get_session),
):
    """Replace a task's editable fields. Applies the completion timestamp rule."""
    task = await update_task(session, task_id, task_in)
    await session.commit()

    log.info("Updated task", task_id=task.id, title=task.title, is_completed=task.is_completed)

    return Response(status_code=204)


@router.delete("/{task_id}", status_code=204, response_class=Response, responses=_NOT_FOUND)
async def delete_task_endpoint(
    task_id: int,
    session: AsyncSession = Depends(get_session),
):
    """Delete a task."""
    task = await delete_task(session, task_id)
    await session.commit()

    log.info("Deleted task", task_id=task_id, title=task.title)

    return Response(status_code=204)
