"""
models/location.py
------------------
Hierarchical storage location.

path is the materialized ancestor chain ('root.garage.shelf_a'). It is kept
in step with the name chain by LocationService; there is no trigger doing it.
Deletion is soft (SoftDeleteMixin); queries filter with Location.live().
"""

from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from box_organizer.db.base import Base, SoftDeleteMixin, TimestampMixin, generate_uuid


class Location(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "locations"
    __table_args__ = (Index("ix_locations_workspace_path", "workspace_id", "path"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    path: Mapped[str] = mapped_column(String(2048), nullable=False)

    def __repr__(self) -> str:
        return f"<Location id={self.id} path={self.path}>"
