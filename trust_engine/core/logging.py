"""
structlog setup for the API, the suspension sweeper and arq jobs.

Every line carries the request ID and, once authentication has run, the
acting user and their role (user, moderator, admin). Lines written outside a
request (sweeper, worker) are attributed to the "system" actor unless a job
binds its own context.

Report descriptions, sanction reasons and moderator notes are cut down before
rendering; the full text lives in the database, not in logs.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import EventDict, Processor

from trust_engine.config import settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[int | None] = ContextVar("user_id", default=None)
actor_role_ctx: ContextVar[str | None] = ContextVar("actor_role", default=None)

SYSTEM_ACTOR = "system"

# Keys whose values may be user- or moderator-written text
FREE_TEXT_KEYS = frozenset({"description", "reason", "notes", "review_notes", "additional_info"})
FREE_TEXT_LOG_LIMIT = 80


def add_actor_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach request ID, acting user and actor role."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_ctx.get()
    if user_id:
        event_dict["user_id"] = user_id

    if request_id or user_id:
        role = actor_role_ctx.get()
        if role:
            event_dict.setdefault("actor_role", role)
    else:
        event_dict.setdefault("actor_role", SYSTEM_ACTOR)

    return event_dict


def truncate_free_text(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    for key in FREE_TEXT_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str) and len(value) > FREE_TEXT_LOG_LIMIT:
            event_dict[key] = f"{value[:FREE_TEXT_LOG_LIMIT]}... ({len(value)} chars)"
    return event_dict


def use_console_renderer() -> bool:
    if settings.LOG_FORMAT:
        return settings.LOG_FORMAT == "console"
    return settings.ENVIRONMENT == "development"


def configure_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    LOG_FORMAT picks "console" or "json"; unset, development gets the
    console renderer and every other environment JSON.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_actor_context,
        truncate_free_text,
        structlog.processors.StackInfoRenderer(),
    ]

    if use_console_renderer():
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    # The request middleware already logs each request with its ID
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("arq.jobs").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Example:
        logger = get_logger(__name__)
        logger.info("report_submitted", report_id=123, target_kind="POST")
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def set_request_context(request_id: str) -> None:
    request_id_ctx.set(request_id)


def set_actor_context(user_id: int, role: str | None = None) -> None:
    """Record who is acting in this request. Called by the auth dependencies."""
    user_id_ctx.set(user_id)
    if role:
        actor_role_ctx.set(role)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    user_id_ctx.set(None)
    actor_role_ctx.set(None)


def bind_context(**kwargs: Any) -> None:
    """
    Bind context to every later log line in this task (arq jobs, sweeper).

    Example:
        bind_context(task="notify_user_suspended", suspension_id=42)
    """
    structlog.contextvars.bind_contextvars(**kwargs)
