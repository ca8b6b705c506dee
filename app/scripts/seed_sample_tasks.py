"""
Insert the sample tasks into an empty tasks table.

Usage:
    python -m app.scripts.seed_sample_tasks [--database-url URL]

The same routine runs on server startup when TB_SEED_SAMPLE_DATA is set.
"""

import argparse
import asyncio
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select

from app.core.config import get_settings
from app.models.base import utcnow
from app.models.task import Task
from taskboard_shared.schemas.common import TaskPriority

log = structlog.get_logger()

# (title, description, category, priority, age in days)
SAMPLE_TASKS = [
    (
        "Setup Development Environment",
        "Install and configure the API server, web client and PostgreSQL",
        "Development",
        TaskPriority.HIGH,
        2,
    ),
    (
        "Learn Vue.js Composition API",
        "Study Vue 3 Composition API and best practices",
        "Learning",
        TaskPriority.MEDIUM,
        1,
    ),
    (
        "Implement User Authentication",
        "Add JWT-based authentication to the API",
        "Development",
        TaskPriority.HIGH,
        0,
    ),
]


async def seed_sample_tasks(session: AsyncSession) -> int:
    """Add the sample tasks if the table is empty. Returns the number inserted."""
    existing = await session.scalar(select(func.count()).select_from(Task))
    if existing:
        log.info("Sample data skipped, tasks table not empty", existing=existing)
        return 0

    now = utcnow()
    for title, description, category, priority, age_days in SAMPLE_TASKS:
        session.add(
            Task(
                title=title,
                description=description,
                category=category,
                priority=priority.value,
                created_at=now - timedelta(days=age_days),
            )
        )
    await session.flush()

    log.info("Seeded sample tasks", count=len(SAMPLE_TASKS))
    return len(SAMPLE_TASKS)


async def main(database_url: Optional[str] = None) -> int:
    engine = create_async_engine(database_url or get_settings().database_url)
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    try:
        async with async_session() as session:
            inserted = await seed_sample_tasks(session)
            await session.commit()
    finally:
        await engine.dispose()

    print(f"Inserted {inserted} sample task(s).")
    return inserted


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the tasks table with sample data.")
    parser.add_argument("--database-url", default=None, help="Override TB_DATABASE_URL")

    args = parser.parse_args()

    asyncio.run(main(args.database_url))
