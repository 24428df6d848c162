"""Account deletion orchestrator: scope, atomicity and failure reporting."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.errors import (
    AccountDeletionError,
    AuthRevocationError,
    UserAccountNotFoundError,
)
from box_organizer.models import AuthUser, Box, Location, Profile, QrCode, Workspace, WorkspaceMember
from box_organizer.services.account_service import AccountDeletionService, DeletionStage
from box_organizer.services.identity_service import LocalIdentityProvider, get_identity_provider
from conftest import DEFAULT_PASSWORD, UserFactory
from helpers import add_member, create_box, create_location, generate_codes
from main import app


class FailingIdentityProvider(LocalIdentityProvider):
    async def revoke(self, db, user_id):
        raise AuthRevocationError("Identity provider unavailable")


async def _count(db: AsyncSession, model, *conditions) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*conditions))


async def _populate(client: AsyncClient, make_user: UserFactory) -> tuple[dict, dict, dict]:
    """alice owns two workspaces with content; bob owns one and shares workspaces with alice."""
    alice = await make_user("alice@inventory.io")
    bob = await make_user("bob@inventory.io")

    garage = await create_location(client, alice, "Garage")
    codes = await generate_codes(client, alice, quantity=2)
    await create_box(client, alice, "Tools", location_id=garage["id"], qr_code_id=codes[0]["id"])
    await create_box(client, alice, "Books")

    response = await client.post("/api/workspaces", headers=alice["headers"], json={"name": "Cabin"})
    cabin = response.json()

    bobs_code = (await generate_codes(client, bob))[0]
    bobs_box = await create_box(client, bob, "Bob's box", qr_code_id=bobs_code["id"])
    await add_member(client, bob, alice)
    await add_member(client, alice, bob, role="admin")
    return alice, bob, {"cabin": cabin, "bobs_box": bobs_box}


async def test_deletes_owned_workspaces_and_keeps_others(
    client: AsyncClient, make_user: UserFactory, db_session: AsyncSession
) -> None:
    alice, bob, extra = await _populate(client, make_user)
    owned = [alice["workspace_id"], extra["cabin"]["id"]]

    service = AccountDeletionService(db_session, LocalIdentityProvider())
    assert await service.delete_account(alice["id"]) == alice["id"]
    assert service.stage is DeletionStage.DONE

    assert await _count(db_session, Workspace, Workspace.owner_id == alice["id"]) == 0
    assert await _count(db_session, Box, Box.workspace_id.in_(owned)) == 0
    assert await _count(db_session, Location, Location.workspace_id.in_(owned)) == 0
    assert await _count(db_session, WorkspaceMember, WorkspaceMember.workspace_id.in_(owned)) == 0
    assert await _count(db_session, WorkspaceMember, WorkspaceMember.user_id == alice["id"]) == 0
    assert await _count(db_session, QrCode, QrCode.workspace_id.in_(owned), QrCode.status == "assigned") == 0
    assert await _count(db_session, Profile, Profile.id == alice["id"]) == 0
    assert await _count(db_session, AuthUser, AuthUser.id == alice["id"]) == 0

    # bob's workspace, box and profile are untouched
    assert await _count(db_session, Workspace, Workspace.id == bob["workspace_id"]) == 1
    assert await _count(db_session, Box, Box.id == extra["bobs_box"]["id"]) == 1
    assert await _count(db_session, Profile, Profile.id == bob["id"]) == 1
    assert await _count(
        db_session, QrCode, QrCode.workspace_id == bob["workspace_id"], QrCode.status == "assigned"
    ) == 1

    members = await client.get(f"/api/workspaces/{bob['workspace_id']}/members", headers=bob["headers"])
    assert [m["user_id"] for m in members.json()] == [bob["id"]]


async def test_user_without_owned_workspaces(
    client: AsyncClient, make_user: UserFactory, db_session: AsyncSession, monkeypatch
) -> None:
    alice = await make_user("alice@inventory.io")
    bob = await make_user("bob@inventory.io")
    await add_member(client, bob, alice)
    response = await client.delete(f"/api/workspaces/{alice['workspace_id']}", headers=alice["headers"])
    assert response.status_code == 204

    async def must_not_run(self, workspace_ids):
        raise AssertionError("workspace steps should be skipped")

    monkeypatch.setattr(AccountDeletionService, "_delete_boxes", must_not_run)

    service = AccountDeletionService(db_session, LocalIdentityProvider())
    await service.delete_account(alice["id"])
    assert service.stage is DeletionStage.DONE
    assert await _count(db_session, Profile, Profile.id == alice["id"]) == 0
    assert await _count(db_session, WorkspaceMember, WorkspaceMember.user_id == alice["id"]) == 0
    assert await _count(db_session, Workspace, Workspace.id == bob["workspace_id"]) == 1


async def test_unknown_user(client: AsyncClient, make_user: UserFactory, db_session: AsyncSession) -> None:
    await make_user("alice@inventory.io")
    tables = (AuthUser, Profile, Workspace, WorkspaceMember)
    before = [await _count(db_session, model) for model in tables]

    service = AccountDeletionService(db_session, LocalIdentityProvider())
    with pytest.raises(UserAccountNotFoundError):
        await service.delete_account("00000000-0000-0000-0000-000000000000")
    assert service.stage is DeletionStage.VERIFYING
    assert [await _count(db_session, model) for model in tables] == before


@pytest.mark.parametrize(
    "step,stage",
    [
        ("_delete_boxes", "deleting_boxes"),
        ("_reset_codes", "resetting_codes"),
        ("_delete_locations", "deleting_locations"),
        ("_delete_memberships", "deleting_memberships"),
        ("_delete_workspaces", "deleting_workspaces"),
        ("_delete_profile", "deleting_profile"),
    ],
)
async def test_failed_step_rolls_everything_back(
    client: AsyncClient,
    make_user: UserFactory,
    db_session: AsyncSession,
    monkeypatch,
    step: str,
    stage: str,
) -> None:
    alice, _, _ = await _populate(client, make_user)

    async def broken(self, *args):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(AccountDeletionService, step, broken)

    service = AccountDeletionService(db_session, LocalIdentityProvider())
    with pytest.raises(AccountDeletionError) as exc_info:
        await service.delete_account(alice["id"])
    assert exc_info.value.stage == stage
    assert stage in exc_info.value.message

    assert await _count(db_session, Profile, Profile.id == alice["id"]) == 1
    assert await _count(db_session, Box, Box.workspace_id == alice["workspace_id"]) == 2
    assert await _count(db_session, Location, Location.workspace_id == alice["workspace_id"]) == 1
    assert await _count(db_session, Workspace, Workspace.owner_id == alice["id"]) == 2
    assert await _count(db_session, QrCode, QrCode.status == "assigned") == 2
    assert await _count(db_session, WorkspaceMember, WorkspaceMember.user_id == alice["id"]) == 3
    assert await _count(db_session, AuthUser, AuthUser.id == alice["id"]) == 1


async def test_revocation_failure_keeps_account(
    client: AsyncClient, make_user: UserFactory, db_session: AsyncSession
) -> None:
    alice, _, _ = await _populate(client, make_user)

    service = AccountDeletionService(db_session, FailingIdentityProvider())
    with pytest.raises(AuthRevocationError) as exc_info:
        await service.delete_account(alice["id"])
    assert exc_info.value.stage == "revoking_auth"

    assert await _count(db_session, Profile, Profile.id == alice["id"]) == 1
    assert await _count(db_session, Workspace, Workspace.owner_id == alice["id"]) == 2


async def test_delete_account_endpoint(client: AsyncClient, make_user: UserFactory) -> None:
    alice, bob, _ = await _populate(client, make_user)

    response = await client.delete("/api/auth/delete-account", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json() == {"user_id": alice["id"]}

    assert (await client.get("/api/profiles/me", headers=alice["headers"])).status_code == 401
    response = await client.post(
        "/api/auth/login", json={"email": alice["email"], "password": DEFAULT_PASSWORD}
    )
    assert response.status_code == 401

    response = await client.get(f"/api/workspaces/{alice['workspace_id']}", headers=bob["headers"])
    assert response.status_code == 404
    assert (await client.get("/api/profiles/me", headers=bob["headers"])).status_code == 200


async def test_delete_account_endpoint_reports_revocation_failure(
    client: AsyncClient, make_user: UserFactory
) -> None:
    alice = await make_user("alice@inventory.io")
    app.dependency_overrides[get_identity_provider] = FailingIdentityProvider
    try:
        response = await client.delete("/api/auth/delete-account", headers=alice["headers"])
    finally:
        app.dependency_overrides.pop(get_identity_provider, None)

    assert response.status_code == 500
    assert response.json() == {"error": "Identity provider unavailable"}
    assert (await client.get("/api/profiles/me", headers=alice["headers"])).status_code == 200


async def test_delete_account_endpoint_without_profile(
    client: AsyncClient, make_user: UserFactory, db_session: AsyncSession
) -> None:
    alice = await make_user("alice@inventory.io")
    await db_session.execute(delete(WorkspaceMember).where(WorkspaceMember.user_id == alice["id"]))
    await db_session.execute(delete(Workspace).where(Workspace.owner_id == alice["id"]))
    await db_session.execute(delete(Profile).where(Profile.id == alice["id"]))
    await db_session.commit()

    response = await client.delete("/api/auth/delete-account", headers=alice["headers"])
    assert response.status_code == 404
    assert response.json() == {"error": "User account not found"}
    assert await _count(db_session, AuthUser, AuthUser.id == alice["id"]) == 1

    # every other authenticated route still needs the profile
    assert (await client.get("/api/profiles/me", headers=alice["headers"])).status_code == 401


async def test_email_can_register_again_after_deletion(
    client: AsyncClient, make_user: UserFactory
) -> None:
    alice = await make_user("alice@inventory.io")
    response = await client.delete("/api/auth/delete-account", headers=alice["headers"])
    assert response.status_code == 200

    again = await make_user("alice@inventory.io")
    assert again["id"] != alice["id"]
    assert (await client.get("/api/profiles/me", headers=alice["headers"])).status_code == 401
    assert (await client.get("/api/profiles/me", headers=again["headers"])).status_code == 200
