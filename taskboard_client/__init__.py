"""Taskboard API client and the client-side task state mirror."""

from .service import TaskService, TaskServiceError
from .store import TaskStore

__all__ = ["TaskService", "TaskServiceError", "TaskStore"]
