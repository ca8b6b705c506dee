"""
structlog configuration for the Taskboard server.

Every event carries ``service="taskboard"`` so audit lines (``Created new
task`` and friends) can be told apart from uvicorn's own output when both
land in one stream.
"""

from __future__ import annotations

import structlog

SERVICE_NAME = "taskboard"


def add_service_name(logger, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog; ``fmt`` is ``json`` for production, ``text`` for a console."""
    processors = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if fmt == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            structlog.get_level_from_name(level)
        ),
    )
