"""
db/base.py
----------
Declarative base and shared mixins.

TimestampMixin:  created_at / updated_at, both filled by the database.
SoftDeleteMixin: is_deleted flag plus the `live()` filter every read of a
                 soft-deletable table goes through.

Primary keys are UUID strings so they work the same on Postgres and SQLite
and cannot be enumerated across workspaces.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class TimestampMixin:
    """Adds server-side created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """Rows are flagged instead of removed; flagged rows are invisible."""

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @classmethod
    def live(cls):
        return cls.is_deleted.is_(False)


def generate_uuid() -> str:
    return str(uuid.uuid4())
