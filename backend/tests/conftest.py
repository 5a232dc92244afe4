"""Shared test fixtures for all test groups."""

import os

# Set before any app module reads settings (get_settings is lru_cached).
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_PRICE_PRO", "price_test_pro")
os.environ.setdefault("FREE_PROMPT_LIMIT", "50")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.auth import AuthUser, require_auth
from app.db.base import Base
from app.db.models.profile import Profile

TEST_USER_ID = "user_test_001"
OTHER_USER_ID = "user_test_002"


@pytest.fixture
async def engine(tmp_path) -> AsyncEngine:
    """Create a test engine and point the global session factory at it.

    Uses a throwaway SQLite file per test unless TEST_DATABASE_URL is set.
    """
    import app.db.base as db_mod

    url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url, echo=False)

    # Import all models so metadata is populated
    import app.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    db_mod._engine = engine
    db_mod._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    db_mod._engine = None
    db_mod._session_factory = None
    await engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncSession:
    """Session for arranging and inspecting rows directly."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_profile(db_session):
    """Insert a Profile row and return it."""

    async def _make(user_id: str = TEST_USER_ID, **fields) -> Profile:
        profile = Profile(
            id=user_id,
            email=fields.pop("email", f"{user_id}@test.com"),
            is_pro=fields.pop("is_pro", False),
            **fields,
        )
        db_session.add(profile)
        await db_session.commit()
        return profile

    return _make


def override_auth(user: AuthUser):
    """Dependency override factory for require_auth."""

    async def _override():
        return user

    return _override


@pytest.fixture
def app(engine) -> FastAPI:
    """Full application with auth overridden to TEST_USER_ID."""
    from app.main import create_app

    application = create_app()
    application.dependency_overrides[require_auth] = override_auth(
        AuthUser(user_id=TEST_USER_ID, claims={"sub": TEST_USER_ID, "email": f"{TEST_USER_ID}@test.com"})
    )
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
