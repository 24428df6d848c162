"""
models/qr_code.py
-----------------
QR code registry.

A code links to at most one box (box_id is unique). status == 'assigned'
exactly when box_id is set; BoxService maintains this on create and delete.
"""

import re
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from box_organizer.db.base import Base, TimestampMixin, generate_uuid

QR_SHORT_ID_PATTERN = re.compile(r"^QR-[A-Z0-9]{6}$")


class QrStatus(str, PyEnum):
    generated = "generated"
    printed = "printed"
    assigned = "assigned"


class QrCode(Base, TimestampMixin):
    __tablename__ = "qr_codes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    box_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("boxes.id", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )
    short_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=QrStatus.generated.value
    )

    def __repr__(self) -> str:
        return f"<QrCode short_id={self.short_id} status={self.status}>"
