"""
api/routes/workspaces.py
------------------------
Workspace and membership endpoints.

GET    /api/workspaces                                — Workspaces the caller belongs to.
POST   /api/workspaces                                — Create a workspace (caller becomes owner).
GET    /api/workspaces/{workspace_id}                 — One workspace.
PATCH  /api/workspaces/{workspace_id}                 — Rename (owner only).
DELETE /api/workspaces/{workspace_id}                 — Delete with all contents (owner only).
GET    /api/workspaces/{workspace_id}/members         — List members.
POST   /api/workspaces/{workspace_id}/members         — Invite a registered user (owner/admin).
PATCH  /api/workspaces/{workspace_id}/members/{uid}   — Change a member's role (owner/admin).
DELETE /api/workspaces/{workspace_id}/members/{uid}   — Remove a member, or leave.
"""

from fastapi import APIRouter, Response, status

from box_organizer.dependencies import CurrentUser, DbSession
from box_organizer.models.workspace import MemberRole
from box_organizer.schemas.workspace import (
    MemberAdd,
    MemberRead,
    MemberRoleUpdate,
    WorkspaceCreate,
    WorkspaceRead,
    WorkspaceUpdate,
)
from box_organizer.services.workspace_service import WorkspaceService

router = APIRouter(prefix="/api/workspaces", tags=["Workspaces"])


@router.get("", response_model=list[WorkspaceRead], summary="List my workspaces")
async def list_workspaces(current_user: CurrentUser, db: DbSession) -> list[WorkspaceRead]:
    workspaces = await WorkspaceService.list_user_workspaces(db, current_user.id)
    return [WorkspaceRead.model_validate(w) for w in workspaces]


@router.post(
    "",
    response_model=WorkspaceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a workspace",
)
async def create_workspace(
    body: WorkspaceCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> WorkspaceRead:
    workspace = await WorkspaceService.create_workspace(db, current_user.id, body.name)
    return WorkspaceRead.model_validate(workspace)


@router.get("/{workspace_id}", response_model=WorkspaceRead, summary="Get a workspace")
async def get_workspace(
    workspace_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> WorkspaceRead:
    workspace = await WorkspaceService.get_workspace(db, workspace_id, current_user.id)
    return WorkspaceRead.model_validate(workspace)


@router.patch("/{workspace_id}", response_model=WorkspaceRead, summary="Rename a workspace")
async def update_workspace(
    workspace_id: str,
    body: WorkspaceUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> WorkspaceRead:
    workspace = await WorkspaceService.update_workspace(db, workspace_id, current_user.id, body.name)
    return WorkspaceRead.model_validate(workspace)


@router.delete(
    "/{workspace_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a workspace and everything in it",
)
async def delete_workspace(
    workspace_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> Response:
    await WorkspaceService.delete_workspace(db, workspace_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Members ───────────────────────────────────────────────────────────────────

@router.get(
    "/{workspace_id}/members",
    response_model=list[MemberRead],
    summary="List workspace members",
)
async def list_members(
    workspace_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> list[MemberRead]:
    rows = await WorkspaceService.list_members(db, workspace_id, current_user.id)
    return [MemberRead.from_row(member, profile) for member, profile in rows]


@router.post(
    "/{workspace_id}/members",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a registered user to the workspace",
)
async def add_member(
    workspace_id: str,
    body: MemberAdd,
    current_user: CurrentUser,
    db: DbSession,
) -> MemberRead:
    member, profile = await WorkspaceService.add_member(
        db,
        workspace_id=workspace_id,
        actor_id=current_user.id,
        email=body.email,
        role=MemberRole(body.role.value),
    )
    return MemberRead.from_row(member, profile)


@router.patch(
    "/{workspace_id}/members/{user_id}",
    response_model=MemberRead,
    summary="Change a member's role",
)
async def update_member_role(
    workspace_id: str,
    user_id: str,
    body: MemberRoleUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> MemberRead:
    member, profile = await WorkspaceService.update_member_role(
        db,
        workspace_id=workspace_id,
        actor_id=current_user.id,
        target_user_id=user_id,
        role=MemberRole(body.role.value),
    )
    return MemberRead.from_row(member, profile)


@router.delete(
    "/{workspace_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member (or leave the workspace)",
)
async def remove_member(
    workspace_id: str,
    user_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> Response:
    await WorkspaceService.remove_member(db, workspace_id, current_user.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
