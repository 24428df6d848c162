"""Request helpers shared by the API tests."""

from __future__ import annotations

from typing import Any

from httpx import AsyncClient


async def add_member(
    client: AsyncClient,
    owner: dict[str, Any],
    member: dict[str, Any],
    role: str = "member",
    workspace_id: str | None = None,
) -> None:
    response = await client.post(
        f"/api/workspaces/{workspace_id or owner['workspace_id']}/members",
        headers=owner["headers"],
        json={"email": member["email"], "role": role},
    )
    assert response.status_code == 201, response.text


async def create_location(
    client: AsyncClient,
    user: dict[str, Any],
    name: str,
    parent_id: str | None = None,
    workspace_id: str | None = None,
) -> dict[str, Any]:
    response = await client.post(
        "/api/locations",
        headers=user["headers"],
        json={
            "workspace_id": workspace_id or user["workspace_id"],
            "name": name,
            "parent_id": parent_id,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def generate_codes(
    client: AsyncClient, user: dict[str, Any], quantity: int = 1
) -> list[dict[str, Any]]:
    response = await client.post(
        "/api/qr-codes/batch",
        headers=user["headers"],
        json={"workspace_id": user["workspace_id"], "quantity": quantity},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_box(
    client: AsyncClient, user: dict[str, Any], name: str, **fields: Any
) -> dict[str, Any]:
    payload = {"workspace_id": user["workspace_id"], "name": name, **fields}
    response = await client.post("/api/boxes", headers=user["headers"], json=payload)
    assert response.status_code == 201, response.text
    return response.json()
