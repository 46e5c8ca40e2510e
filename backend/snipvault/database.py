"""Database engine, session factory, and declarative base.

Two FastAPI dependencies:
  - get_db()               → one request-scoped session (commit on success)
  - get_session_factory()  → the sessionmaker itself, for callers that fan
                             out into several independent sessions (the
                             recycle bin aggregator)
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from snipvault.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=20,
    max_overflow=10,
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    """Base for every SnipVault table."""
    pass


# ── Session dependencies ────────────────────────────────────

async def get_db() -> AsyncSession:
    """Yield a session; commit when the request succeeds, roll back otherwise."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_session
