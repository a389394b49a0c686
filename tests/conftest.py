"""
Shared pytest fixtures.

Provides:
- an in-memory SQLite relation store with the full schema
- sessions bound to it
- an ASGI client wired to the same store
- user / video factories and a login helper
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import vidshare.models  # noqa: F401
from vidshare.db.base import Base
from vidshare.db.repositories import user_repo, video_repo
from vidshare.db.session import get_db
from vidshare.main import app
from vidshare.services.auth_service import hash_password

PASSWORD = "s3cret-pass"


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Let SQLAlchemy emit BEGIN itself so SAVEPOINT behaves like on PostgreSQL
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


# =============================================================================
# HTTP Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(session_maker):
    """ASGI client running in the test's event loop against the test store."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def make_user(session):
    async def _make_user(username: str, full_name: str | None = None):
        user = await user_repo.create_user(
            session,
            username=username,
            email=f"{username}@mail.com",
            full_name=full_name or username.title(),
            password_hash=hash_password(PASSWORD),
            avatar=f"https://cdn.test/{username}.png",
        )
        await session.commit()
        return user

    return _make_user


@pytest.fixture
def make_video(session):
    async def _make_video(owner, title: str = "Clip", views: int = 0, is_published: bool = True):
        video = await video_repo.create_video(
            session,
            owner_id=owner.id,
            title=title,
            description=f"{title} description",
            video_file=f"https://cdn.test/{title}.mp4",
            thumbnail=f"https://cdn.test/{title}.jpg",
            duration=12.5,
            is_published=is_published,
        )
        video.views = views
        await session.commit()
        return video

    return _make_video


@pytest.fixture
def register_and_login(client):
    """Register a user through the API and return the login payload."""

    async def _register_and_login(username: str) -> dict:
        response = await client.post(
            "/api/v1/users/register",
            json={
                "fullName": username.title(),
                "email": f"{username}@mail.com",
                "username": username,
                "password": PASSWORD,
                "avatar": f"https://cdn.test/{username}.png",
            },
        )
        assert response.status_code == 201, response.text
        response = await client.post("/api/v1/users/login", json={"username": username, "password": PASSWORD})
        assert response.status_code == 200, response.text
        return response.json()

    return _register_and_login