"""
Concurrent requests on the same key, each with its own session and connection.

Uses a file-backed SQLite store so every session gets a separate connection.
Transactions open with BEGIN IMMEDIATE, so the store serializes the two
writers the way row locks do on PostgreSQL: the second request waits for
the first to commit and then runs against its result.
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import vidshare.models  # noqa: F401
from vidshare.db.base import Base
from vidshare.db.repositories import user_repo, video_repo
from vidshare.errors import TokenReused
from vidshare.models import Like
from vidshare.services import token_service, toggle_service
from vidshare.services.auth_service import hash_password
from vidshare.services.toggle_service import TargetKind, ToggleResult


# =============================================================================
# Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def shared_maker(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'store.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 10},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _take_write_lock(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def create_user(maker, username: str):
    async with maker() as session:
        user = await user_repo.create_user(
            session,
            username=username,
            email=f"{username}@mail.com",
            full_name=username.title(),
            password_hash=hash_password("s3cret-pass"),
            avatar=f"https://cdn.test/{username}.png",
        )
        await session.commit()
        return user


# =============================================================================
# Rotation
# =============================================================================

class TestConcurrentRotation:
    """Two rotations of one refresh token: exactly one wins."""

    async def test_one_rotation_wins(self, shared_maker):
        user = await create_user(shared_maker, "alice")
        async with shared_maker() as session:
            pair = await token_service.issue_pair(session, user)
            await session.commit()

        async def rotate_once():
            async with shared_maker() as session:
                try:
                    _, new_pair = await token_service.rotate(session, pair.refresh_token)
                    await session.commit()
                    return new_pair
                except TokenReused:
                    await session.rollback()
                    return None

        outcomes = await asyncio.gather(rotate_once(), rotate_once())

        winners = [outcome for outcome in outcomes if outcome is not None]
        assert len(winners) == 1
        # The winner's refresh token is the one that still rotates
        async with shared_maker() as session:
            _, again = await token_service.rotate(session, winners[0].refresh_token)
            await session.commit()
            assert again.refresh_token != winners[0].refresh_token


# =============================================================================
# Toggle
# =============================================================================

class TestConcurrentToggle:
    """Two identical toggles never leave a duplicate row."""

    @pytest.mark.parametrize("rounds", [1, 2])
    async def test_identical_toggles(self, shared_maker, rounds):
        owner = await create_user(shared_maker, "bob")
        fan = await create_user(shared_maker, "alice")
        async with shared_maker() as session:
            video = await video_repo.create_video(
                session, owner.id, "Clip", "", "https://cdn.test/clip.mp4", "https://cdn.test/clip.jpg", 1.0
            )
            await session.commit()

        async def toggle_once():
            async with shared_maker() as session:
                result = await toggle_service.toggle(session, fan.id, TargetKind.video, video.id)
                await session.commit()
                return result

        for _ in range(rounds):
            results = await asyncio.gather(toggle_once(), toggle_once())
            assert sorted(result.value for result in results) == [ToggleResult.created.value, ToggleResult.deleted.value]

        async with shared_maker() as session:
            assert await session.scalar(select(func.count()).select_from(Like)) == 0
