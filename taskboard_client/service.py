"""
HTTP client for the Taskboard API.

Thin wrapper over httpx.AsyncClient: one method per endpoint, responses parsed
into the shared wire schemas, failures raised as TaskServiceError carrying the
server's error message.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from taskboard_shared.schemas.common import TaskPriority
from taskboard_shared.schemas.tasks import TaskCreate, TaskRead, TaskStats, TaskUpdate

log = structlog.get_logger()

DEFAULT_BASE_URL = "http://localhost:8000/api"
DEFAULT_TIMEOUT_SECONDS = 30.0


class TaskServiceError(Exception):
    """A request to the API failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if body.get("detail"):
            return str(body["detail"])
    return f"Request failed with status code {resp.status_code}"


class TaskService:
    """
    Async client for /api/tasks.

    Use as an async context manager, or call open()/close() explicitly. A
    custom httpx transport can be supplied (tests pass an ASGITransport).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TaskService":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        await self.open()
        assert self._client
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            log.error("Task API unreachable", method=method, path=path, error=str(exc))
            raise TaskServiceError(f"Network error: {exc}") from exc

        if resp.is_error:
            message = _error_message(resp)
            log.warning(
                "Task API error",
                method=method,
                path=path,
                status=resp.status_code,
                message=message,
            )
            raise TaskServiceError(message, resp.status_code)
        return resp

    # --- Tasks ---

    async def get_tasks(
        self,
        is_completed: Optional[bool] = None,
        category: Optional[str] = None,
        priority: Optional[TaskPriority] = None,
    ) -> list[TaskRead]:
        params: dict[str, str] = {}
        if is_completed is not None:
            params["isCompleted"] = "true" if is_completed else "false"
        if category:
            params["category"] = category
        if priority is not None:
            params["priority"] = str(int(priority))

        resp = await self._request("GET", "/tasks", params=params)
        return [TaskRead.model_validate(item) for item in resp.json()]

    async def get_task(self, task_id: int) -> TaskRead:
        resp = await self._request("GET", f"/tasks/{task_id}")
        return TaskRead.model_validate(resp.json())

    async def create_task(self, task: TaskCreate) -> TaskRead:
        resp = await self._request(
            "POST", "/tasks", json=task.model_dump(mode="json", by_alias=True)
        )
        return TaskRead.model_validate(resp.json())

    async def update_task(self, task: TaskUpdate) -> None:
        await self._request(
            "PUT", f"/tasks/{task.id}", json=task.model_dump(mode="json", by_alias=True)
        )

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    # --- Aggregates ---

    async def get_categories(self) -> list[str]:
        resp = await self._request("GET", "/tasks/categories")
        return list(resp.json())

    async def get_stats(self) -> TaskStats:
        resp = await self._request("GET", "/tasks/stats")
        return TaskStats.model_validate(resp.json())
