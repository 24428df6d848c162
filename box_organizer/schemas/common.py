"""
schemas/common.py
-----------------
Shared response envelopes and validation helpers.

Validation failures are reported as {field: message}, keeping only the first
message per field.
"""

from typing import Any, Iterable, Optional

from pydantic import BaseModel

from box_organizer.core.config import settings

_LOCATION_ROOTS = ("body", "query", "path", "header", "cookie")
_VALUE_ERROR_PREFIX = "Value error, "


class ErrorResponse(BaseModel):
    error: str
    details: Optional[dict[str, str]] = None


class PageMeta(BaseModel):
    total: int
    limit: int
    offset: int


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_ROOTS:
        parts = parts[1:]
    return ".".join(parts) or "body"


def first_error_per_field(errors: Iterable[dict[str, Any]]) -> dict[str, str]:
    """Collapse a pydantic error list into {field: first message}."""
    details: dict[str, str] = {}
    for err in errors:
        field = _field_name(err.get("loc", ()))
        if field in details:
            continue
        message = str(err.get("msg", "Invalid value"))
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        details[field] = message
    return details


# ── Reusable field cleaners ───────────────────────────────────────────────────

def clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    if len(value) > settings.NAME_MAX_LENGTH:
        raise ValueError(f"Name must be at most {settings.NAME_MAX_LENGTH} characters")
    return value


def clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if len(value) > settings.DESCRIPTION_MAX_LENGTH:
        raise ValueError(
            f"Description must be at most {settings.DESCRIPTION_MAX_LENGTH} characters"
        )
    return value


def clean_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value
