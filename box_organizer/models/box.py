"""
models/box.py
-------------
Inventory box.

location_id NULL means "unassigned". search_vector is a derived, lower-cased
document of name, description and tags, rewritten on every save.
"""

from typing import Optional

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from box_organizer.db.base import Base, TimestampMixin, generate_uuid


def build_search_document(name: str, description: Optional[str], tags: Optional[list[str]]) -> str:
    parts = [name, description or "", " ".join(tags or [])]
    return " ".join(p for p in parts if p).lower()


class Box(Base, TimestampMixin):
    __tablename__ = "boxes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    location_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    short_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    search_vector: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def refresh_search_vector(self) -> None:
        self.search_vector = build_search_document(self.name, self.description, self.tags)

    def __repr__(self) -> str:
        return f"<Box id={self.id} short_id={self.short_id}>"
