"""
Error taxonomy and the JSON error envelope returned by the API.

Every error body has the shape::

    {"error": {"code": "...", "message": "...", "status": 400}}
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = structlog.get_logger()


class TaskboardError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(TaskboardError):
    """A required field is missing or a field exceeds its length limit."""
    status_code = 400
    code = "VALIDATION_FAILED"


class MismatchError(TaskboardError):
    """The id in the request path disagrees with the id in the body."""
    status_code = 400
    code = "ID_MISMATCH"


class NotFoundError(TaskboardError):
    status_code = 404
    code = "NOT_FOUND"


class ConcurrencyError(TaskboardError):
    """Reserved: updates are last-write-wins and never raise this today."""
    status_code = 409
    code = "CONCURRENCY_CONFLICT"


def error_response(
    status_code: int, code: str, message: str, field: Optional[str] = None
) -> JSONResponse:
    error = {"code": code, "message": message, "status": status_code}
    if field:
        error["field"] = field
    return JSONResponse(status_code=status_code, content={"error": error})


async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    log.info(
        "Request failed",
        status=exc.status_code,
        code=exc.code,
        message=exc.message,
    )
    return error_response(exc.status_code, exc.code, exc.message, exc.field)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Only the first problem is reported; clients show one message per action.
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or None
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    log.info("Request validation failed", field=field)
    return error_response(400, ValidationError.code, message, field)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("Unhandled error", error=str(exc), exc_info=exc)
    return error_response(500, TaskboardError.code, "An unexpected error occurred.")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskboardError, taskboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
