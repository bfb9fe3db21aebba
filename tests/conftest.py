"""Shared fixtures: in-memory database, profiles and an authenticated HTTP client."""

from __future__ import annotations

import uuid

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from renova.db import get_db
from renova.main import app
from renova.models.db import Base, Profile
from renova.services.workspace import reset_workspaces
from tests.factories import make_token


@pytest.fixture(autouse=True)
def _clear_workspaces():
    reset_workspaces()
    yield
    reset_workspaces()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_profile(db):
    """Insert a profile and return it."""

    async def _make(
        *, credits: int = 20, is_admin: bool = False, email: str | None = None
    ) -> Profile:
        user_id = uuid.uuid4()
        profile = Profile(
            id=user_id,
            email=email or f"{user_id.hex[:8]}@example.com",
            first_name="Ana",
            last_name="Souza",
            credits=credits,
            is_admin=is_admin,
        )
        db.add(profile)
        await db.commit()
        return profile

    return _make


@pytest.fixture
def auth_headers():
    def _headers(profile: Profile) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(str(profile.id), profile.email)}"}

    return _headers


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
