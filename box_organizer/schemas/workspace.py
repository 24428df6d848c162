"""
schemas/workspace.py
--------------------
Pydantic request/response models for workspaces and their members.

Naming convention:
  WorkspaceCreate  → inbound request body
  WorkspaceRead    → outbound response body

The 'owner' role is never accepted as input: ownership is fixed at creation.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from box_organizer.models.profile import Profile
from box_organizer.models.workspace import WorkspaceMember
from box_organizer.schemas.common import clean_email, clean_name


class AssignableRole(str, Enum):
    admin = "admin"
    member = "member"
    read_only = "read_only"


class WorkspaceCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)


class WorkspaceUpdate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)


class WorkspaceRead(BaseModel):
    id: str
    name: str
    owner_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MemberAdd(BaseModel):
    email: EmailStr
    role: AssignableRole = AssignableRole.member

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return clean_email(v)


class MemberRoleUpdate(BaseModel):
    role: AssignableRole


class MemberRead(BaseModel):
    workspace_id: str
    user_id: str
    email: str
    full_name: Optional[str] = None
    role: str
    joined_at: datetime

    @classmethod
    def from_row(cls, member: WorkspaceMember, profile: Profile) -> "MemberRead":
        return cls(
            workspace_id=member.workspace_id,
            user_id=member.user_id,
            email=profile.email,
            full_name=profile.full_name,
            role=member.role,
            joined_at=member.joined_at,
        )
