"""
API Router

All task endpoints live under /api/tasks.
"""

from fastapi import APIRouter

from . import tasks

router = APIRouter()

router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "tasks",
        "version": "0.1.0",
        "endpoints": [
            "/tasks",
            "/tasks/{id}",
            "/tasks/categories",
            "/tasks/stats",
        ],
    }
