"""Inventory export as CSV and JSON."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone

from httpx import AsyncClient

from box_organizer.services.export_service import CSV_HEADER
from conftest import UserFactory
from helpers import create_box, create_location, generate_codes


async def _export(client: AsyncClient, user: dict, **params):
    params.setdefault("workspace_id", user["workspace_id"])
    return await client.get("/api/export/inventory", headers=user["headers"], params=params)


async def test_csv_export(client: AsyncClient, make_user: UserFactory) -> None:
    alice = await make_user("alice@inventory.io")
    garage = await create_location(client, alice, "Garage")
    shelf = await create_location(client, alice, "Shelf A", parent_id=garage["id"])
    code = (await generate_codes(client, alice))[0]
    tools = await create_box(
        client,
        alice,
        'Box, with "quotes"',
        description="line one",
        tags=["metal", "heavy"],
        location_id=shelf["id"],
        qr_code_id=code["id"],
    )
    loose = await create_box(client, alice, "Loose box")

    response = await _export(client, alice)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    assert response.headers["content-disposition"] == (
        f'attachment; filename="inventory-{alice["workspace_id"]}-{today}.csv"'
    )

    assert '"Box, with ""quotes"""' in response.text
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == CSV_HEADER
    assert rows[1:] == [
        [
            'Box, with "quotes"',
            "line one",
            "metal,heavy",
            "Garage > Shelf A",
            code["short_id"],
            "assigned",
            tools["short_id"],
        ],
        ["Loose box", "", "", "Unassigned", "", "", loose["short_id"]],
    ]


async def test_empty_export_has_header_only(client: AsyncClient, make_user: UserFactory) -> None:
    alice = await make_user("alice@inventory.io")
    response = await _export(client, alice)
    assert response.text == ",".join(CSV_HEADER) + "\n"


async def test_json_export(client: AsyncClient, make_user: UserFactory) -> None:
    alice = await make_user("alice@inventory.io")
    await create_box(client, alice, "Books", tags=["paper"])

    response = await _export(client, alice, format="json")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.headers["content-disposition"].endswith('.json"')

    document = response.json()
    assert document["meta"]["workspace_id"] == alice["workspace_id"]
    assert document["meta"]["total_records"] == 1
    assert document["meta"]["format_version"] == "1.0"
    datetime.fromisoformat(document["meta"]["export_date"])
    assert document["data"][0]["name"] == "Books"
    assert document["data"][0]["tags"] == ["paper"]
    assert document["data"][0]["location"] == "Unassigned"


async def test_export_limited_to_location_subtree(client: AsyncClient, make_user: UserFactory) -> None:
    alice = await make_user("alice@inventory.io")
    garage = await create_location(client, alice, "Garage")
    shelf = await create_location(client, alice, "Shelf", parent_id=garage["id"])
    attic = await create_location(client, alice, "Attic")
    await create_box(client, alice, "On garage floor", location_id=garage["id"])
    await create_box(client, alice, "On shelf", location_id=shelf["id"])
    await create_box(client, alice, "In attic", location_id=attic["id"])
    await create_box(client, alice, "Nowhere")

    response = await _export(client, alice, format="json", location_id=garage["id"])
    names = {r["name"] for r in response.json()["data"]}
    assert names == {"On garage floor", "On shelf"}


async def test_export_rejects_unknown_format(client: AsyncClient, make_user: UserFactory) -> None:
    alice = await make_user("alice@inventory.io")
    response = await _export(client, alice, format="xml")
    assert response.status_code == 400


async def test_export_requires_membership(client: AsyncClient, make_user: UserFactory) -> None:
    alice = await make_user("alice@inventory.io")
    bob = await make_user("bob@inventory.io")
    response = await _export(client, bob, workspace_id=alice["workspace_id"])
    assert response.status_code == 403
