"""Flip an (actor, target) relation: delete it if present, create it otherwise.

Used for likes and subscriptions. The relation tables carry a unique index on
the (actor, target) key; the toggle deletes first and only inserts when
nothing was deleted. An insert that collides with a row created concurrently
is rolled back to its savepoint and the delete is retried, so two identical
toggles racing each other end as one ``created`` and one ``deleted``.
"""
import enum
import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.store import execute
from vidshare.errors import Conflict, TargetNotFound
from vidshare.models import Comment, Like, LikeKind, LikeTarget, Subscription, Tweet, User, Video

logger = logging.getLogger(__name__)

MAX_TOGGLE_ROUNDS = 3


class TargetKind(str, enum.Enum):
    video = "video"
    comment = "comment"
    tweet = "tweet"
    channel = "channel"


class ToggleResult(str, enum.Enum):
    created = "created"
    deleted = "deleted"


_TARGET_MODELS = {
    TargetKind.video: Video,
    TargetKind.comment: Comment,
    TargetKind.tweet: Tweet,
    TargetKind.channel: User,
}

_TARGET_LABELS = {
    TargetKind.video: "Video",
    TargetKind.comment: "Comment",
    TargetKind.tweet: "Tweet",
    TargetKind.channel: "Channel",
}


@dataclass(frozen=True)
class RelationKey:
    """Identifies at most one row of ``model`` through its unique columns."""

    model: type
    values: dict = field(hash=False)

    def where(self):
        return [getattr(self.model, column) == value for column, value in self.values.items()]


def like_key(actor_id: UUID, target: LikeTarget) -> RelationKey:
    return RelationKey(
        Like, {"liked_by_id": actor_id, "target_kind": target.kind.value, "target_id": target.id}
    )


def subscription_key(subscriber_id: UUID, channel_id: UUID) -> RelationKey:
    return RelationKey(Subscription, {"subscriber_id": subscriber_id, "channel_id": channel_id})


def relation_key(actor_id: UUID, kind: TargetKind, target_id: UUID) -> RelationKey:
    if kind is TargetKind.channel:
        return subscription_key(actor_id, target_id)
    return like_key(actor_id, LikeTarget(LikeKind(kind.value), target_id))


async def target_exists(session: AsyncSession, kind: TargetKind, target_id: UUID, timeout: float | None = None) -> bool:
    model = _TARGET_MODELS[kind]
    result = await execute(session, select(model.id).where(model.id == target_id).limit(1), timeout)
    return result.scalars().first() is not None


async def _delete_relation(session: AsyncSession, key: RelationKey, timeout: float | None) -> int:
    result = await execute(
        session,
        delete(key.model).where(*key.where()).execution_options(synchronize_session=False),
        timeout,
    )
    return result.rowcount


async def _insert_relation(session: AsyncSession, key: RelationKey, timeout: float | None) -> None:
    async with session.begin_nested():
        await execute(session, insert(key.model).values(**key.values), timeout)


async def toggle_relation(session: AsyncSession, key: RelationKey, timeout: float | None = None) -> ToggleResult:
    for attempt in range(1, MAX_TOGGLE_ROUNDS + 1):
        if await _delete_relation(session, key, timeout):
            return ToggleResult.deleted
        try:
            await _insert_relation(session, key, timeout)
        except IntegrityError:
            logger.info(f"{key.model.__name__} toggle lost an insert race (attempt {attempt}), retrying")
            continue
        return ToggleResult.created
    raise Conflict("Relation changed concurrently, try again")


async def toggle(
    session: AsyncSession,
    actor_id: UUID,
    kind: TargetKind,
    target_id: UUID,
    timeout: float | None = None,
) -> ToggleResult:
    """Create the (actor, target) relation if absent, delete it if present.

    The target must exist for every kind. Self-targeting is not checked here.
    """
    if not await target_exists(session, kind, target_id, timeout):
        raise TargetNotFound(f"{_TARGET_LABELS[kind]} does not exist")
    result = await toggle_relation(session, relation_key(actor_id, kind, target_id), timeout)
    logger.info(f"User {actor_id} toggled {kind.value} {target_id}: {result.value}")
    return result
