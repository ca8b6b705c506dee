"""
Service-layer tests run directly against an AsyncSession.
"""

from __future__ import annotations

import pytest

from app.core.errors import MismatchError, NotFoundError, ValidationError
from app.models.task import Task
from app.services.tasks import (
    check_task_constraints,
    compute_stats,
    create_task,
    delete_task,
    get_task_or_404,
    list_categories,
    list_tasks,
    update_task,
)
from taskboard_shared.schemas.common import TaskPriority
from taskboard_shared.schemas.tasks import TaskCreate, TaskUpdate


def _update_from(task: Task, **changes) -> TaskUpdate:
    fields = dict(
        id=task.id,
        title=task.title,
        description=task.description,
        is_completed=task.is_completed,
        priority=TaskPriority(task.priority),
        category=task.category,
        due_date=task.due_date,
    )
    fields.update(changes)
    return TaskUpdate(**fields)


class TestConstraints:

    def test_valid_task_passes(self):
        check_task_constraints(Task(title="ok", category="c" * 50, description="d" * 1000))

    @pytest.mark.parametrize(
        "fields, field",
        [
            ({"title": ""}, "title"),
            ({"title": "x" * 201}, "title"),
            ({"title": "ok", "description": "d" * 1001}, "description"),
            ({"title": "ok", "category": "c" * 51}, "category"),
            ({"title": "ok", "priority": 7}, "priority"),
        ],
    )
    def test_violations(self, fields, field):
        with pytest.raises(ValidationError) as exc_info:
            check_task_constraints(Task(**fields))
        assert exc_info.value.field == field
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_create_enforces_constraints(self, session):
        # model_construct skips schema validation, so the write-time check is what fails
        task_in = TaskCreate.model_construct(title="x" * 201, priority=TaskPriority.LOW)
        with pytest.raises(ValidationError):
            await create_task(session, task_in)


class TestCommands:

    @pytest.mark.asyncio
    async def test_create(self, session):
        task = await create_task(session, TaskCreate(title="Plan sprint", category="Work"))
        assert task.id is not None
        assert task.is_completed is False
        assert task.completed_at is None
        assert task.priority == TaskPriority.MEDIUM
        assert task.created_at is not None

    @pytest.mark.asyncio
    async def test_update_completion_rule(self, session):
        task = await create_task(session, TaskCreate(title="Ship"))
        created_at = task.created_at

        task = await update_task(session, task.id, _update_from(task, is_completed=True))
        assert task.completed_at is not None
        first_completion = task.completed_at

        task = await update_task(session, task.id, _update_from(task, title="Ship it"))
        assert task.completed_at == first_completion

        task = await update_task(session, task.id, _update_from(task, is_completed=False))
        assert task.completed_at is None
        assert task.created_at == created_at

    @pytest.mark.asyncio
    async def test_update_mismatch_checked_first(self, session):
        task = await create_task(session, TaskCreate(title="Mine"))
        with pytest.raises(MismatchError):
            await update_task(session, task.id + 100, _update_from(task, title="Changed"))
        assert (await get_task_or_404(session, task.id)).title == "Mine"

    @pytest.mark.asyncio
    async def test_update_missing(self, session):
        with pytest.raises(NotFoundError):
            await update_task(session, 5, TaskUpdate(id=5, title="Nope"))

    @pytest.mark.asyncio
    async def test_delete(self, session):
        task = await create_task(session, TaskCreate(title="Bye"))
        deleted = await delete_task(session, task.id)
        assert deleted.title == "Bye"
        with pytest.raises(NotFoundError):
            await get_task_or_404(session, task.id)

    @pytest.mark.asyncio
    async def test_delete_missing(self, session):
        with pytest.raises(NotFoundError) as exc_info:
            await delete_task(session, 42)
        assert exc_info.value.message == "Task with ID 42 not found."


class TestQueries:

    @pytest.mark.asyncio
    async def test_list_filters_and_order(self, session):
        a = await create_task(session, TaskCreate(title="a", category="Development", priority=TaskPriority.HIGH))
        await create_task(session, TaskCreate(title="b", category="Learning", priority=TaskPriority.HIGH))
        c = await create_task(session, TaskCreate(title="c", category="Development", priority=TaskPriority.LOW))

        titles = [t.title for t in await list_tasks(session)]
        assert titles == ["c", "b", "a"]

        dev = await list_tasks(session, category="Development")
        assert [t.id for t in dev] == [c.id, a.id]

        dev_high = await list_tasks(session, category="Development", priority=TaskPriority.HIGH)
        assert [t.id for t in dev_high] == [a.id]

        assert await list_tasks(session, is_completed=True) == []

    @pytest.mark.asyncio
    async def test_categories(self, session):
        for category in ("b", "a", None, "", "b", "B"):
            await create_task(session, TaskCreate(title="t", category=category))
        assert await list_categories(session) == ["B", "a", "b"]

    @pytest.mark.asyncio
    async def test_stats_empty(self, session):
        stats = await compute_stats(session)
        assert stats.total_tasks == 0
        assert stats.completion_rate == 0

    @pytest.mark.asyncio
    async def test_stats(self, session):
        tasks = [await create_task(session, TaskCreate(title=f"t{i}")) for i in range(4)]
        for task in tasks[:3]:
            await update_task(session, task.id, _update_from(task, is_completed=True))

        stats = await compute_stats(session)
        assert (stats.total_tasks, stats.completed_tasks, stats.pending_tasks) == (4, 3, 1)
        assert stats.completion_rate == 75.0


class TestOrdinalOrdering:

    @pytest.mark.asyncio
    async def test_categories_sorted_by_code_point(self, session):
        """Uppercase sorts before lowercase and non-ASCII last, whatever the collation."""
        for category in ("apple", "Zebra", "Äpfel", "banana", "Apple"):
            await create_task(session, TaskCreate(title="t", category=category))
        assert await list_categories(session) == ["Apple", "Zebra", "apple", "banana", "Äpfel"]

    @pytest.mark.asyncio
    async def test_out_of_range_id_is_not_found(self, session):
        """Ids beyond the 32-bit key range are reported as missing, not passed to the driver."""
        with pytest.raises(NotFoundError):
            await get_task_or_404(session, 2**63)
