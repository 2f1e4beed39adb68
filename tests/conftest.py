"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL.  ``StaticPool`` keeps a single connection so every
session sees the same in-memory database.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from limofare.domain.entities import PricingSettings, ServicePackage
from limofare.infrastructure.database import Base

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


# ── Domain fixtures ───────────────────────────────────────────────────


@pytest.fixture
def default_settings() -> PricingSettings:
    return PricingSettings.defaults()


@pytest.fixture
def fixed_package() -> ServicePackage:
    return ServicePackage(id="pkg-airport", name="Airport Transfer", base_price=250.0)


# ── Database fixtures ─────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables on a fresh in-memory engine, drop it afterwards."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by the SQLite session factory."""

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    from limofare.api.app import create_app
    from limofare.api.dependencies import get_db
    from limofare.api.middleware import limiter

    limiter.reset()

    app = create_app()
    app.dependency_overrides[get_db] = _test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
