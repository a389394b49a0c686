"""
Tests for the like / subscription toggle.
"""

import uuid

import pytest
from sqlalchemy import func, select

from vidshare.db.repositories import comment_repo, tweet_repo
from vidshare.errors import Conflict, TargetNotFound
from vidshare.models import Like, LikeKind, LikeTarget, Subscription
from vidshare.services import toggle_service
from vidshare.services.toggle_service import TargetKind, ToggleResult


async def count_rows(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


# =============================================================================
# Toggle Semantics
# =============================================================================

class TestToggle:
    """Two toggles of the same pair return the relation to where it started."""

    async def test_like_video_then_unlike(self, session, make_user, make_video):
        owner = await make_user("bob")
        fan = await make_user("alice")
        video = await make_video(owner)

        first = await toggle_service.toggle(session, fan.id, TargetKind.video, video.id)
        assert first is ToggleResult.created
        assert await count_rows(session, Like) == 1

        second = await toggle_service.toggle(session, fan.id, TargetKind.video, video.id)
        assert second is ToggleResult.deleted
        assert await count_rows(session, Like) == 0

    async def test_like_comment_and_tweet(self, session, make_user, make_video):
        owner = await make_user("bob")
        fan = await make_user("alice")
        video = await make_video(owner)
        comment = await comment_repo.create_comment(session, owner.id, video.id, "first!")
        tweet = await tweet_repo.create_tweet(session, owner.id, "hello")
        await session.commit()

        assert await toggle_service.toggle(session, fan.id, TargetKind.comment, comment.id) is ToggleResult.created
        assert await toggle_service.toggle(session, fan.id, TargetKind.tweet, tweet.id) is ToggleResult.created

        likes = (await session.execute(select(Like).order_by(Like.target_kind))).scalars().all()
        assert [like.target for like in likes] == [
            LikeTarget(LikeKind.comment, comment.id),
            LikeTarget(LikeKind.tweet, tweet.id),
        ]

    async def test_subscribe_then_unsubscribe(self, session, make_user):
        channel = await make_user("bob")
        fan = await make_user("alice")

        assert await toggle_service.toggle(session, fan.id, TargetKind.channel, channel.id) is ToggleResult.created
        assert await count_rows(session, Subscription) == 1
        assert await toggle_service.toggle(session, fan.id, TargetKind.channel, channel.id) is ToggleResult.deleted
        assert await count_rows(session, Subscription) == 0

    async def test_self_like_is_allowed(self, session, make_user, make_video):
        owner = await make_user("bob")
        video = await make_video(owner)

        assert await toggle_service.toggle(session, owner.id, TargetKind.video, video.id) is ToggleResult.created


class TestTargetExistence:
    """Every kind checks that its target exists before toggling."""

    @pytest.mark.parametrize("kind", list(TargetKind))
    async def test_missing_target(self, session, make_user, kind):
        actor = await make_user("alice")
        with pytest.raises(TargetNotFound):
            await toggle_service.toggle(session, actor.id, kind, uuid.uuid4())
        assert await count_rows(session, Like) == 0
        assert await count_rows(session, Subscription) == 0


# =============================================================================
# Lost Races
# =============================================================================

class TestInsertRace:
    """A competing insert between our delete and insert must not duplicate the row."""

    async def test_lost_insert_race_ends_as_delete(self, session, make_user, make_video, monkeypatch):
        owner = await make_user("bob")
        fan = await make_user("alice")
        video = await make_video(owner)
        # The other request already created the like
        await toggle_service.toggle(session, fan.id, TargetKind.video, video.id)

        real_delete = toggle_service._delete_relation
        calls = []

        async def blind_first_delete(session, key, timeout):
            calls.append(key)
            if len(calls) == 1:
                return 0
            return await real_delete(session, key, timeout)

        monkeypatch.setattr(toggle_service, "_delete_relation", blind_first_delete)

        result = await toggle_service.toggle(session, fan.id, TargetKind.video, video.id)
        assert result is ToggleResult.deleted
        assert len(calls) == 2
        assert await count_rows(session, Like) == 0

    async def test_persistent_collision_is_conflict(self, session, make_user, make_video, monkeypatch):
        owner = await make_user("bob")
        fan = await make_user("alice")
        video = await make_video(owner)
        await toggle_service.toggle(session, fan.id, TargetKind.video, video.id)

        async def never_deletes(session, key, timeout):
            return 0

        monkeypatch.setattr(toggle_service, "_delete_relation", never_deletes)

        with pytest.raises(Conflict):
            await toggle_service.toggle(session, fan.id, TargetKind.video, video.id)
        # Savepoints rolled back; the original like is intact
        assert await count_rows(session, Like) == 1
