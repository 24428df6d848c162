"""
core/logging.py
---------------
Structured logging using structlog.
DEBUG=true  → human-readable console output
DEBUG=false → JSON (for log aggregators like Datadog, CloudWatch)

Request context that may carry credentials goes through sanitize_metadata()
before it is bound to a log event.
"""

import logging
import sys
from typing import Any, Mapping

import structlog

from box_organizer.core.config import settings

SENSITIVE_KEYS = ("password", "token", "secret", "authorization", "cookie")
REDACTED = "[REDACTED]"


def configure_logging() -> None:
    log_level = logging.DEBUG if settings.DEBUG else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if not settings.DEBUG:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.DEBUG
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__):
    return structlog.get_logger(name)


def mask_jwt(token: str) -> str:
    """Keep only the edges of a JWT so it can be correlated but not replayed."""
    if len(token) <= 12:
        return REDACTED
    return f"{token[:6]}...{token[-6:]}"


def sanitize_metadata(meta: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Return a copy of ``meta`` with credential-like values redacted."""
    if meta is None:
        return None
    clean: dict[str, Any] = {}
    for key, value in meta.items():
        lowered = key.lower()
        if any(marker in lowered for marker in SENSITIVE_KEYS):
            if isinstance(value, str) and value.count(".") == 2:
                clean[key] = mask_jwt(value)
            else:
                clean[key] = REDACTED
        elif isinstance(value, Mapping):
            clean[key] = sanitize_metadata(value)
        else:
            clean[key] = value
    return clean
