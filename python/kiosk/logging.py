"""Structured logging for the kiosk CMS using structlog.

Every entry is rendered through one stdlib handler, so structlog loggers and
third-party stdlib loggers (uvicorn, sqlalchemy, the auth middleware) share a
format. Request-scoped fields are carried in a single context mapping:

- request_id: correlation id, also echoed as X-Request-ID
- method, path: raw request line (never the query string)
- admin_email: the authenticated CMS admin, once known

Usage:
    logger = get_logger(__name__)
    logger.info("bubble_deleted", bubble_id=str(bubble_id), deleted_count=3)
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

REQUEST_CONTEXT_FIELDS = ("request_id", "method", "path", "admin_email")

_request_context: ContextVar[dict[str, str] | None] = ContextVar("request_context", default=None)

# Loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "alembic.runtime.migration")


def merge_request_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    """structlog processor: copy request context into the event without overriding it."""
    for key, value in (_request_context.get() or {}).items():
        event_dict.setdefault(key, value)
    return event_dict


def configure_logging(json_format: bool = True, level: str | int = "INFO") -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Safe to call more than once; the root handler is replaced each time.
    """
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        merge_request_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_context(request_id: str | None, **fields: str | None) -> None:
    """Start or extend the context for the current request.

    A new request_id starts a fresh context; repeating the current one adds
    fields to it. Unknown field names are rejected.
    """
    unknown = set(fields) - set(REQUEST_CONTEXT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown request context fields: {', '.join(sorted(unknown))}")

    current = _request_context.get() or {}
    context = dict(current) if current.get("request_id") == request_id else {}
    if request_id:
        context["request_id"] = request_id
    context.update({key: value for key, value in fields.items() if value is not None})
    _request_context.set(context)


def clear_request_context() -> None:
    _request_context.set(None)


def get_request_context() -> dict[str, str]:
    """Return a copy of the current request context."""
    return dict(_request_context.get() or {})


def get_request_id() -> str | None:
    return (_request_context.get() or {}).get("request_id")
