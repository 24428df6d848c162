"""Shared pytest fixtures for the box organizer tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

# Settings are read at import time, so the environment is prepared first.
_DB_DIR = tempfile.mkdtemp(prefix="box-organizer-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.sqlite"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production-use")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEBUG"] = "false"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from box_organizer.db.session import AsyncSessionLocal, engine  # noqa: E402
from box_organizer.models import Base  # noqa: E402
from main import app  # noqa: E402

DEFAULT_PASSWORD = "correct-horse-battery"

UserFactory = Callable[..., Awaitable[dict[str, Any]]]


@pytest_asyncio.fixture()
async def database() -> AsyncIterator[None]:
    """Fresh schema for every test; the engine is disposed so no pooled
    connection outlives the test's event loop."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(database: None) -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture()
async def client(database: None) -> AsyncIterator[AsyncClient]:
    """Provide an HTTPX async client bound to the FastAPI app."""

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture()
async def make_user(client: AsyncClient) -> UserFactory:
    """Register and log in a user; returns id, bearer headers and default workspace."""

    async def _make(email: str, password: str = DEFAULT_PASSWORD, **extra: Any) -> dict[str, Any]:
        response = await client.post(
            "/api/auth/register",
            json={"email": email, "password": password, **extra},
        )
        assert response.status_code == 201, response.text
        user_id = response.json()["id"]

        response = await client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
        )
        assert response.status_code == 200, response.text
        token = response.json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = await client.get("/api/workspaces", headers=headers)
        assert response.status_code == 200, response.text
        client.cookies.clear()

        return {
            "id": user_id,
            "email": email,
            "password": password,
            "token": token,
            "headers": headers,
            "workspace_id": response.json()[0]["id"],
        }

    return _make
