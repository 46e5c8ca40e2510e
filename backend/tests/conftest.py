"""Pytest configuration and fixtures for SnipVault tests.

Each test gets its own on-disk SQLite database (aiosqlite) so the
aggregator's concurrent per-kind sessions see the same committed data
without an external PostgreSQL.
"""

from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import snipvault.models  # noqa: F401 (registers every table on Base.metadata)
from snipvault.auth.jwt import create_access_token
from snipvault.database import Base, get_db, get_session_factory
from snipvault.main import app
from snipvault.models.category import Category
from snipvault.models.folder import Folder
from snipvault.models.media import MediaCategory, MediaFile, MediaFolder
from snipvault.models.snippet import Snippet

ALICE = "user_alice"
BOB = "user_bob"


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'snipvault_test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose DB dependencies point at the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Auth Fixtures ────────────────────────────────────────────────

@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token(ALICE)}"}


@pytest.fixture
def other_auth_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token(BOB)}"}


# ── Test Data Fixtures ───────────────────────────────────────────

class Seeder:
    """Inserts committed rows so every session can see them."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, entity):
        self.session.add(entity)
        await self.session.commit()
        return entity

    async def snippet(self, owner_id: str = ALICE, title: str = "Snippet", **kwargs) -> Snippet:
        kwargs.setdefault("code", "print('hello')")
        kwargs.setdefault("language", "python")
        return await self._add(Snippet(owner_id=owner_id, title=title, **kwargs))

    async def folder(self, owner_id: str = ALICE, name: str = "Folder", **kwargs) -> Folder:
        return await self._add(Folder(owner_id=owner_id, name=name, **kwargs))

    async def category(self, owner_id: str = ALICE, name: str = "Category", **kwargs) -> Category:
        return await self._add(Category(owner_id=owner_id, name=name, **kwargs))

    async def media_folder(self, owner_id: str = ALICE, name: str = "Photos") -> MediaFolder:
        return await self._add(MediaFolder(owner_id=owner_id, name=name))

    async def media_category(self, owner_id: str = ALICE, name: str = "Screenshots") -> MediaCategory:
        return await self._add(MediaCategory(owner_id=owner_id, name=name))

    async def media_file(self, owner_id: str = ALICE, file_name: str = "a.png", **kwargs) -> MediaFile:
        kwargs.setdefault("file_type", "image/png")
        kwargs.setdefault("file_url", f"https://cdn.example.com/{file_name}")
        return await self._add(MediaFile(owner_id=owner_id, file_name=file_name, **kwargs))

    async def deleted(self, entity, deleted_at: datetime):
        """Mark an already seeded row deleted at a fixed instant."""
        entity.deleted_at = deleted_at
        await self.session.commit()
        return entity

    async def reload(self, model, entity_id: str):
        """Fresh row from the store, or None once it has been purged."""
        result = await self.session.execute(
            select(model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


@pytest.fixture
def seed(db_session) -> Seeder:
    return Seeder(db_session)


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "integration: Integration tests")
