"""
models/workspace.py
-------------------
Workspace (tenant) and membership models.

Each workspace is an isolated unit: locations, boxes and QR codes all carry
workspace_id and every query filters on it. Exactly one member holds the
'owner' role and matches workspaces.owner_id; the services keep that true.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from box_organizer.db.base import Base, TimestampMixin, generate_uuid


class MemberRole(str, PyEnum):
    owner = "owner"
    admin = "admin"
    member = "member"
    read_only = "read_only"


# Roles allowed to create / modify inventory data
WRITE_ROLES = (MemberRole.owner, MemberRole.admin, MemberRole.member)
# Roles allowed to manage membership
MANAGE_ROLES = (MemberRole.owner, MemberRole.admin)


class Workspace(Base, TimestampMixin):
    __tablename__ = "workspaces"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Workspace id={self.id} name={self.name}>"


class WorkspaceMember(Base):
    __tablename__ = "workspace_members"

    workspace_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MemberRole.member.value
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<WorkspaceMember workspace_id={self.workspace_id} user_id={self.user_id} role={self.role}>"
