"""
services/workspace_service.py
-----------------------------
Business logic for workspaces, memberships and role checks.

Every other service goes through require_member() before touching rows of a
workspace, so this module is the single place where tenant isolation and
role rules are decided.

Access policy:
  - workspace named in a request body / query, caller not a member → 403
  - resource addressed by its own id, caller not a member          → 404
  - member with a role too weak for the operation                   → 403
"""

from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.errors import (
    DuplicateMemberError,
    InsufficientPermissionsError,
    NotFoundError,
    OwnerRemovalError,
    UserAccountNotFoundError,
    WorkspaceMembershipError,
    WorkspaceNotFoundError,
    WorkspaceOwnershipError,
)
from box_organizer.core.logging import get_logger
from box_organizer.models.box import Box
from box_organizer.models.location import Location
from box_organizer.models.profile import Profile
from box_organizer.models.qr_code import QrCode
from box_organizer.models.workspace import (
    MANAGE_ROLES,
    MemberRole,
    Workspace,
    WorkspaceMember,
)

logger = get_logger(__name__)


class WorkspaceService:

    # ── Access checks ────────────────────────────────────────────────────────

    @staticmethod
    async def get_membership(
        db: AsyncSession, workspace_id: str, user_id: str
    ) -> WorkspaceMember | None:
        result = await db.execute(
            select(WorkspaceMember).where(
                WorkspaceMember.workspace_id == workspace_id,
                WorkspaceMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def require_member(
        db: AsyncSession,
        workspace_id: str,
        user_id: str,
        roles: Optional[Iterable[MemberRole]] = None,
    ) -> WorkspaceMember:
        """
        Return the caller's membership or raise.

        Raises WorkspaceMembershipError if the caller is not a member and
        InsufficientPermissionsError if ``roles`` is given and the caller's
        role is not among them.
        """
        membership = await WorkspaceService.get_membership(db, workspace_id, user_id)
        if membership is None:
            logger.warning("Workspace access denied", workspace_id=workspace_id, user_id=user_id)
            raise WorkspaceMembershipError()
        if roles is not None and membership.role not in {r.value for r in roles}:
            raise InsufficientPermissionsError()
        return membership

    # ── Workspaces ───────────────────────────────────────────────────────────

    @staticmethod
    async def create_workspace(db: AsyncSession, owner_id: str, name: str) -> Workspace:
        """Create a workspace and the owner's membership row."""
        workspace = Workspace(name=name, owner_id=owner_id)
        db.add(workspace)
        await db.flush()
        db.add(
            WorkspaceMember(
                workspace_id=workspace.id,
                user_id=owner_id,
                role=MemberRole.owner.value,
            )
        )
        await db.flush()
        await db.refresh(workspace)
        logger.info("Workspace created", workspace_id=workspace.id, owner_id=owner_id)
        return workspace

    @staticmethod
    async def list_user_workspaces(db: AsyncSession, user_id: str) -> list[Workspace]:
        result = await db.execute(
            select(Workspace)
            .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
            .where(WorkspaceMember.user_id == user_id)
            .order_by(Workspace.created_at, Workspace.name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_workspace(db: AsyncSession, workspace_id: str, user_id: str) -> Workspace:
        """Workspace visible to ``user_id``; hidden workspaces are reported as missing."""
        result = await db.execute(
            select(Workspace)
            .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
            .where(Workspace.id == workspace_id, WorkspaceMember.user_id == user_id)
        )
        workspace = result.scalar_one_or_none()
        if workspace is None:
            raise WorkspaceNotFoundError()
        return workspace

    @staticmethod
    async def update_workspace(
        db: AsyncSession, workspace_id: str, user_id: str, name: str
    ) -> Workspace:
        workspace = await WorkspaceService.get_workspace(db, workspace_id, user_id)
        if workspace.owner_id != user_id:
            raise WorkspaceOwnershipError()
        workspace.name = name
        await db.flush()
        await db.refresh(workspace)
        logger.info("Workspace renamed", workspace_id=workspace_id)
        return workspace

    @staticmethod
    async def delete_workspace(db: AsyncSession, workspace_id: str, user_id: str) -> None:
        """
        Owner-only. Removes the workspace and everything in it; the request
        transaction makes this all-or-nothing.
        """
        workspace = await WorkspaceService.get_workspace(db, workspace_id, user_id)
        if workspace.owner_id != user_id:
            raise WorkspaceOwnershipError()

        await db.execute(delete(QrCode).where(QrCode.workspace_id == workspace_id))
        boxes = await db.execute(delete(Box).where(Box.workspace_id == workspace_id))
        locations = await db.execute(delete(Location).where(Location.workspace_id == workspace_id))
        await db.execute(delete(WorkspaceMember).where(WorkspaceMember.workspace_id == workspace_id))
        await db.execute(delete(Workspace).where(Workspace.id == workspace_id))
        logger.info(
            "Workspace deleted",
            workspace_id=workspace_id,
            boxes=boxes.rowcount,
            locations=locations.rowcount,
        )

    # ── Members ──────────────────────────────────────────────────────────────

    @staticmethod
    async def list_members(
        db: AsyncSession, workspace_id: str, user_id: str
    ) -> list[tuple[WorkspaceMember, Profile]]:
        await WorkspaceService.get_workspace(db, workspace_id, user_id)
        result = await db.execute(
            select(WorkspaceMember, Profile)
            .join(Profile, Profile.id == WorkspaceMember.user_id)
            .where(WorkspaceMember.workspace_id == workspace_id)
            .order_by(WorkspaceMember.joined_at, Profile.email)
        )
        return [(member, profile) for member, profile in result.all()]

    @staticmethod
    async def add_member(
        db: AsyncSession,
        workspace_id: str,
        actor_id: str,
        email: str,
        role: MemberRole,
    ) -> tuple[WorkspaceMember, Profile]:
        await WorkspaceService.get_workspace(db, workspace_id, actor_id)
        await WorkspaceService.require_member(db, workspace_id, actor_id, MANAGE_ROLES)

        result = await db.execute(select(Profile).where(Profile.email == email.lower()))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise UserAccountNotFoundError(f"No user registered with email '{email}'")

        if await WorkspaceService.get_membership(db, workspace_id, profile.id) is not None:
            raise DuplicateMemberError()

        member = WorkspaceMember(workspace_id=workspace_id, user_id=profile.id, role=role.value)
        db.add(member)
        await db.flush()
        await db.refresh(member)
        logger.info(
            "Member added",
            workspace_id=workspace_id,
            user_id=profile.id,
            role=role.value,
            added_by=actor_id,
        )
        return member, profile

    @staticmethod
    async def _get_target_member(
        db: AsyncSession, workspace_id: str, user_id: str
    ) -> WorkspaceMember:
        member = await WorkspaceService.get_membership(db, workspace_id, user_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member

    @staticmethod
    async def update_member_role(
        db: AsyncSession,
        workspace_id: str,
        actor_id: str,
        target_user_id: str,
        role: MemberRole,
    ) -> tuple[WorkspaceMember, Profile]:
        await WorkspaceService.get_workspace(db, workspace_id, actor_id)
        await WorkspaceService.require_member(db, workspace_id, actor_id, MANAGE_ROLES)
        member = await WorkspaceService._get_target_member(db, workspace_id, target_user_id)
        if member.role == MemberRole.owner.value:
            raise OwnerRemovalError("The workspace owner's role cannot be changed")

        member.role = role.value
        await db.flush()
        profile = await db.get(Profile, target_user_id)
        logger.info(
            "Member role changed",
            workspace_id=workspace_id,
            user_id=target_user_id,
            role=role.value,
        )
        return member, profile

    @staticmethod
    async def remove_member(
        db: AsyncSession, workspace_id: str, actor_id: str, target_user_id: str
    ) -> None:
        """Owner/admin may remove anyone but the owner; any member may leave."""
        await WorkspaceService.get_workspace(db, workspace_id, actor_id)
        if target_user_id != actor_id:
            await WorkspaceService.require_member(db, workspace_id, actor_id, MANAGE_ROLES)
        member = await WorkspaceService._get_target_member(db, workspace_id, target_user_id)
        if member.role == MemberRole.owner.value:
            raise OwnerRemovalError()

        await db.delete(member)
        await db.flush()
        logger.info(
            "Member removed",
            workspace_id=workspace_id,
            user_id=target_user_id,
            removed_by=actor_id,
        )
