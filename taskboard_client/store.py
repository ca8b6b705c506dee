"""
Client-side state mirror of the server's task list.

TaskStore owns the task list, the last fetched stats and categories, a loading
flag and a single error slot. Callers read state through properties and
change it only through the async actions. Derived views are rebuilt lazily
after each change of the task list.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from taskboard_shared.schemas.common import TaskPriority
from taskboard_shared.schemas.tasks import (
    UNCATEGORIZED,
    TaskCreate,
    TaskRead,
    TaskStats,
    TaskUpdate,
)

from .service import TaskService, TaskServiceError

log = structlog.get_logger()

Listener = Callable[["TaskStore"], None]


class TaskStore:
    """Single-writer cache of task state, kept in step with the API."""

    def __init__(self, service: TaskService):
        self._service = service
        self._tasks: list[TaskRead] = []
        self._stats = TaskStats()
        self._categories: list[str] = []
        self._loading = False
        self._error: Optional[str] = None
        self._views: dict[str, object] = {}
        self._listeners: list[Listener] = []

    # --- State ---

    @property
    def tasks(self) -> tuple[TaskRead, ...]:
        return tuple(self._tasks)

    @property
    def stats(self) -> TaskStats:
        return self._stats

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._categories)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    # --- Derived views ---

    @property
    def completed_tasks(self) -> tuple[TaskRead, ...]:
        if "completed" not in self._views:
            self._views["completed"] = tuple(t for t in self._tasks if t.is_completed)
        return self._views["completed"]

    @property
    def pending_tasks(self) -> tuple[TaskRead, ...]:
        if "pending" not in self._views:
            self._views["pending"] = tuple(t for t in self._tasks if not t.is_completed)
        return self._views["pending"]

    @property
    def tasks_by_category(self) -> dict[str, tuple[TaskRead, ...]]:
        if "by_category" not in self._views:
            grouped: dict[str, list[TaskRead]] = {}
            for task in self._tasks:
                grouped.setdefault(task.category or UNCATEGORIZED, []).append(task)
            self._views["by_category"] = {name: tuple(items) for name, items in grouped.items()}
        return dict(self._views["by_category"])

    # --- Change notification ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _set_tasks(self, tasks: list[TaskRead]) -> None:
        self._tasks = tasks
        self._views.clear()
        self._notify()

    @asynccontextmanager
    async def _action(self):
        self._loading = True
        self._error = None
        self._notify()
        try:
            yield
        finally:
            self._loading = False
            self._notify()

    def _fail(self, exc: TaskServiceError, action: str) -> None:
        self._error = exc.message
        log.error("Task action failed", action=action, error=exc.message, status=exc.status_code)

    # --- Actions ---

    async def fetch_tasks(
        self,
        is_completed: Optional[bool] = None,
        category: Optional[str] = None,
        priority: Optional[TaskPriority] = None,
    ) -> None:
        async with self._action():
            try:
                tasks = await self._service.get_tasks(
                    is_completed=is_completed, category=category, priority=priority
                )
            except TaskServiceError as exc:
                self._fail(exc, "fetch_tasks")
                return
            self._set_tasks(tasks)

    async def create_task(self, data: TaskCreate) -> TaskRead:
        async with self._action():
            try:
                task = await self._service.create_task(data)
            except TaskServiceError as exc:
                self._fail(exc, "create_task")
                raise
            self._set_tasks([task, *self._tasks])
            await self.fetch_stats()
            return task

    async def update_task(self, data: TaskUpdate) -> None:
        async with self._action():
            try:
                await self._service.update_task(data)
            except TaskServiceError as exc:
                self._fail(exc, "update_task")
                raise

            tasks = list(self._tasks)
            for index, existing in enumerate(tasks):
                if existing.id == data.id:
                    tasks[index] = _merge_update(existing, data)
                    self._set_tasks(tasks)
                    break
            await self.fetch_stats()

    async def delete_task(self, task_id: int) -> None:
        async with self._action():
            try:
                await self._service.delete_task(task_id)
            except TaskServiceError as exc:
                self._fail(exc, "delete_task")
                raise
            self._set_tasks([t for t in self._tasks if t.id != task_id])
            await self.fetch_stats()

    async def toggle_task_completion(self, task_id: int) -> None:
        task = next((t for t in self._tasks if t.id == task_id), None)
        if task is None:
            return

        await self.update_task(
            TaskUpdate(
                id=task.id,
                title=task.title,
                description=task.description,
                priority=task.priority,
                category=task.category,
                due_date=task.due_date,
                is_completed=not task.is_completed,
            )
        )

    async def fetch_stats(self) -> None:
        try:
            self._stats = await self._service.get_stats()
        except TaskServiceError as exc:
            log.error("Error fetching stats", error=exc.message)
            return
        self._notify()

    async def fetch_categories(self) -> None:
        try:
            self._categories = await self._service.get_categories()
        except TaskServiceError as exc:
            log.error("Error fetching categories", error=exc.message)
            return
        self._notify()

    def clear_error(self) -> None:
        self._error = None
        self._notify()


def _merge_update(existing: TaskRead, data: TaskUpdate) -> TaskRead:
    """Overlay submitted fields on the cached task; created_at always survives."""
    completed_at = existing.completed_at
    if data.is_completed and not existing.is_completed:
        completed_at = datetime.now(timezone.utc)
    elif not data.is_completed:
        completed_at = None

    return existing.model_copy(
        update={
            **data.model_dump(exclude={"id"}),
            "completed_at": completed_at,
            "created_at": existing.created_at,
        }
    )
