"""Read-only denormalized views over the relation store.

Each view is computed per call from current state with join-and-aggregate
queries. Dangling references (a liked or watched video that was deleted) are
filtered out, except in playlists where the slot is kept as an unavailable
placeholder because its position matters. A failing sub-query fails the whole
view; partial aggregates are never returned.
"""
import functools
import logging
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from vidshare.db.store import execute
from vidshare.errors import Internal, InvalidInput, NotFound
from vidshare.models import (
    Comment,
    Like,
    LikeKind,
    Playlist,
    PlaylistItem,
    Subscription,
    Tweet,
    User,
    Video,
    WatchHistoryEntry,
)
from vidshare.schemas.channel import ChannelProfile, ChannelStats, SubscribedChannel, SubscriberEntry
from vidshare.schemas.comment import CommentAuthor, CommentPage, CommentWithLikes
from vidshare.schemas.playlist import PlaylistDetail, PlaylistEntry, PlaylistSummary
from vidshare.schemas.tweet import TweetWithOwner
from vidshare.schemas.user import OwnerSummary
from vidshare.schemas.video import LikedVideo, VideoPage, VideoResponse, VideoWithOwner, WatchHistoryItem

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE = 1_000_000
MAX_PAGE_SIZE = 100
SORTABLE_VIDEO_FIELDS = {
    "createdAt": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


def view(func_):
    """Turn unexpected store failures inside a view into ``Internal``."""

    @functools.wraps(func_)
    async def wrapper(*args, **kwargs):
        try:
            return await func_(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"View {func_.__name__} failed: {e.__class__.__name__}", exc_info=True)
            raise Internal()

    return wrapper


def _owner(user: User | None) -> OwnerSummary | None:
    if user is None:
        return None
    return OwnerSummary.model_validate(user)


def _video_with_owner(video: Video, owner: User | None) -> VideoWithOwner:
    # Video.owner is a lazy relationship; the owner row comes from the join instead
    fields = VideoResponse.model_validate(video).model_dump()
    return VideoWithOwner(**fields, owner=_owner(owner))


def _check_page(page: int, page_size: int) -> None:
    if page < 1 or page_size < 1:
        raise InvalidInput("page and page size must be at least 1")
    if page > MAX_PAGE or page_size > MAX_PAGE_SIZE:
        raise InvalidInput(f"page must be at most {MAX_PAGE} and page size at most {MAX_PAGE_SIZE}")


def _count_likes(kind: LikeKind, target_column):
    return (
        select(func.count(Like.id))
        .where(Like.target_kind == kind.value, Like.target_id == target_column)
        .scalar_subquery()
    )


def _subscriber_count(channel_column):
    # Aliased so it still has a FROM when the outer query selects Subscription too
    subscription = aliased(Subscription)
    return select(func.count(subscription.id)).where(subscription.channel_id == channel_column).scalar_subquery()


async def _require_user(session: AsyncSession, user_id: UUID, timeout: float | None) -> None:
    result = await execute(session, select(User.id).where(User.id == user_id), timeout)
    if result.scalars().first() is None:
        raise NotFound("User not found")


@view
async def channel_profile(
    session: AsyncSession,
    username: str,
    viewer_id: UUID | None = None,
    timeout: float | None = None,
) -> ChannelProfile:
    if not username or not username.strip():
        raise InvalidInput("username is missing")
    subscribed_count = (
        select(func.count(Subscription.id)).where(Subscription.subscriber_id == User.id).scalar_subquery()
    )
    columns = [User, _subscriber_count(User.id).label("subscribers"), subscribed_count.label("subscribed")]
    if viewer_id is not None:
        is_subscribed = (
            select(Subscription.id)
            .where(Subscription.channel_id == User.id, Subscription.subscriber_id == viewer_id)
            .exists()
        )
        columns.append(is_subscribed.label("is_subscribed"))
    result = await execute(
        session, select(*columns).where(User.username == username.strip().lower()), timeout
    )
    row = result.first()
    if row is None:
        raise NotFound("Channel does not exist")
    user = row[0]
    return ChannelProfile(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        email=user.email,
        avatar=user.avatar,
        cover_image=user.cover_image,
        created_at=user.created_at,
        subscriber_count=row.subscribers,
        subscribed_count=row.subscribed,
        is_subscribed_by_viewer=bool(row.is_subscribed) if viewer_id is not None else False,
    )


@view
async def watch_history(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> list[WatchHistoryItem]:
    owner = aliased(User)
    result = await execute(
        session,
        select(WatchHistoryEntry, Video, owner)
        .join(Video, Video.id == WatchHistoryEntry.video_id)
        .outerjoin(owner, owner.id == Video.owner_id)
        .where(WatchHistoryEntry.user_id == user_id)
        .order_by(WatchHistoryEntry.id.desc()),
        timeout,
    )
    return [
        WatchHistoryItem(watched_at=entry.watched_at, video=_video_with_owner(video, video_owner))
        for entry, video, video_owner in result.all()
    ]


@view
async def liked_videos(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> list[LikedVideo]:
    """Videos the user liked, oldest like first. Ties keep a stable but unspecified order."""
    owner = aliased(User)
    result = await execute(
        session,
        select(Like, Video, owner)
        .join(Video, Video.id == Like.target_id)
        .outerjoin(owner, owner.id == Video.owner_id)
        .where(Like.liked_by_id == user_id, Like.target_kind == LikeKind.video.value)
        .order_by(Like.created_at, Like.id),
        timeout,
    )
    return [
        LikedVideo(like_id=like.id, liked_at=like.created_at, video=_video_with_owner(video, video_owner))
        for like, video, video_owner in result.all()
    ]


@view
async def playlist_detail(session: AsyncSession, playlist_id: UUID, timeout: float | None = None) -> PlaylistDetail:
    playlist_owner = aliased(User)
    result = await execute(
        session,
        select(Playlist, playlist_owner)
        .outerjoin(playlist_owner, playlist_owner.id == Playlist.owner_id)
        .where(Playlist.id == playlist_id),
        timeout,
    )
    row = result.first()
    if row is None:
        raise NotFound("Playlist does not exist")
    playlist, owner_user = row

    video_owner = aliased(User)
    items = await execute(
        session,
        select(PlaylistItem, Video, video_owner)
        .outerjoin(Video, Video.id == PlaylistItem.video_id)
        .outerjoin(video_owner, video_owner.id == Video.owner_id)
        .where(PlaylistItem.playlist_id == playlist_id)
        .order_by(PlaylistItem.position),
        timeout,
    )
    entries = []
    for index, (item, video, owner_of_video) in enumerate(items.all()):
        entries.append(
            PlaylistEntry(
                position=index,
                video_id=item.video_id,
                available=video is not None,
                video=_video_with_owner(video, owner_of_video) if video is not None else None,
            )
        )
    detail = PlaylistDetail(
        id=playlist.id,
        owner_id=playlist.owner_id,
        name=playlist.name,
        description=playlist.description,
        created_at=playlist.created_at,
        updated_at=playlist.updated_at,
        owner=_owner(owner_user),
        videos=entries,
    )
    return detail


@view
async def video_comments(
    session: AsyncSession,
    video_id: UUID,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
    timeout: float | None = None,
) -> CommentPage:
    """Comments of a video, newest first, each with its author and like count."""
    _check_page(page, page_size)
    total = await execute(
        session, select(func.count(Comment.id)).where(Comment.video_id == video_id), timeout
    )
    author = aliased(User)
    likes = _count_likes(LikeKind.comment, Comment.id)
    result = await execute(
        session,
        select(Comment, author, likes.label("likes"))
        .outerjoin(author, author.id == Comment.owner_id)
        .where(Comment.video_id == video_id)
        .order_by(Comment.created_at.desc(), Comment.id)
        .offset((page - 1) * page_size)
        .limit(page_size),
        timeout,
    )
    items = [
        CommentWithLikes(
            id=comment.id,
            video_id=comment.video_id,
            content=comment.content,
            created_at=comment.created_at,
            owner=CommentAuthor.model_validate(comment_author) if comment_author is not None else None,
            likes_count=likes_count,
        )
        for comment, comment_author, likes_count in result.all()
    ]
    return CommentPage(items=items, page=page, page_size=page_size, total=total.scalar_one())


@view
async def channel_stats(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> ChannelStats:
    """Totals over the user's videos: views, subscribers, videos and likes.

    Likes count both likes on the videos themselves and likes on comments
    left under those videos.
    """
    await _require_user(session, user_id, timeout)
    own_videos = select(Video.id).where(Video.owner_id == user_id)
    own_comments = select(Comment.id).where(Comment.video_id.in_(own_videos))
    total_views = select(func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == user_id)
    total_videos = select(func.count(Video.id)).where(Video.owner_id == user_id)
    total_likes = select(func.count(Like.id)).where(
        or_(
            and_(Like.target_kind == LikeKind.video.value, Like.target_id.in_(own_videos)),
            and_(Like.target_kind == LikeKind.comment.value, Like.target_id.in_(own_comments)),
        )
    )
    result = await execute(
        session,
        select(
            total_views.scalar_subquery().label("views"),
            _subscriber_count(user_id).label("subscribers"),
            total_videos.scalar_subquery().label("videos"),
            total_likes.scalar_subquery().label("likes"),
        ),
        timeout,
    )
    row = result.one()
    return ChannelStats(
        total_views=int(row.views or 0),
        total_subscribers=row.subscribers,
        total_videos=row.videos,
        total_likes=row.likes,
    )


@view
async def channel_subscribers(
    session: AsyncSession, channel_id: UUID, timeout: float | None = None
) -> list[SubscriberEntry]:
    await _require_user(session, channel_id, timeout)
    result = await execute(
        session,
        select(Subscription, User)
        .join(User, User.id == Subscription.subscriber_id)
        .where(Subscription.channel_id == channel_id)
        .order_by(Subscription.created_at, Subscription.id),
        timeout,
    )
    return [
        SubscriberEntry(subscribed_at=subscription.created_at, user=_owner(subscriber))
        for subscription, subscriber in result.all()
    ]


@view
async def subscribed_channels(
    session: AsyncSession, subscriber_id: UUID, timeout: float | None = None
) -> list[SubscribedChannel]:
    await _require_user(session, subscriber_id, timeout)
    result = await execute(
        session,
        select(Subscription, User, _subscriber_count(User.id).label("subscribers"))
        .join(User, User.id == Subscription.channel_id)
        .where(Subscription.subscriber_id == subscriber_id)
        .order_by(Subscription.created_at, Subscription.id),
        timeout,
    )
    return [
        SubscribedChannel(subscribed_at=subscription.created_at, channel=_owner(channel), subscriber_count=count)
        for subscription, channel, count in result.all()
    ]


@view
async def channel_videos(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> list[VideoWithOwner]:
    owner = aliased(User)
    result = await execute(
        session,
        select(Video, owner)
        .join(owner, owner.id == Video.owner_id)
        .where(Video.owner_id == user_id)
        .order_by(Video.created_at.desc()),
        timeout,
    )
    return [_video_with_owner(video, video_owner) for video, video_owner in result.all()]


@view
async def user_playlists(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> list[PlaylistSummary]:
    await _require_user(session, user_id, timeout)
    owner = aliased(User)
    total_videos = (
        select(func.count(PlaylistItem.id)).where(PlaylistItem.playlist_id == Playlist.id).scalar_subquery()
    )
    result = await execute(
        session,
        select(Playlist, owner, total_videos.label("total_videos"))
        .outerjoin(owner, owner.id == Playlist.owner_id)
        .where(Playlist.owner_id == user_id)
        .order_by(Playlist.updated_at.desc()),
        timeout,
    )
    summaries = []
    for playlist, playlist_owner, count in result.all():
        summary = PlaylistSummary(
            id=playlist.id,
            owner_id=playlist.owner_id,
            name=playlist.name,
            description=playlist.description,
            created_at=playlist.created_at,
            updated_at=playlist.updated_at,
            owner=_owner(playlist_owner),
            total_videos=count,
        )
        summaries.append(summary)
    return summaries


@view
async def user_tweets(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> list[TweetWithOwner]:
    await _require_user(session, user_id, timeout)
    owner = aliased(User)
    likes = _count_likes(LikeKind.tweet, Tweet.id)
    result = await execute(
        session,
        select(Tweet, owner, likes.label("likes"))
        .outerjoin(owner, owner.id == Tweet.owner_id)
        .where(Tweet.owner_id == user_id)
        .order_by(Tweet.created_at.desc()),
        timeout,
    )
    return [
        TweetWithOwner(
            id=tweet.id,
            owner_id=tweet.owner_id,
            content=tweet.content,
            created_at=tweet.created_at,
            updated_at=tweet.updated_at,
            owner=_owner(tweet_owner),
            likes_count=count,
        )
        for tweet, tweet_owner, count in result.all()
    ]


@view
async def list_videos(
    session: AsyncSession,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_PAGE_SIZE,
    query: str | None = None,
    sort_by: str = "createdAt",
    sort_type: str = "desc",
    owner_id: UUID | None = None,
    timeout: float | None = None,
) -> VideoPage:
    """Published videos, optionally matching ``query`` in title or description."""
    _check_page(page, limit)
    if sort_by not in SORTABLE_VIDEO_FIELDS:
        raise InvalidInput(f"Cannot sort by {sort_by}")
    if sort_type not in ("asc", "desc"):
        raise InvalidInput("sortType must be asc or desc")

    conditions = [Video.is_published.is_(True)]
    if query and query.strip():
        pattern = f"%{query.strip()}%"
        conditions.append(or_(Video.title.ilike(pattern), Video.description.ilike(pattern)))
    if owner_id is not None:
        conditions.append(Video.owner_id == owner_id)

    total = await execute(session, select(func.count(Video.id)).where(*conditions), timeout)
    column = SORTABLE_VIDEO_FIELDS[sort_by]
    owner = aliased(User)
    result = await execute(
        session,
        select(Video, owner)
        .outerjoin(owner, owner.id == Video.owner_id)
        .where(*conditions)
        .order_by(column.desc() if sort_type == "desc" else column.asc(), Video.id)
        .offset((page - 1) * limit)
        .limit(limit),
        timeout,
    )
    items = [_video_with_owner(video, video_owner) for video, video_owner in result.all()]
    return VideoPage(items=items, page=page, limit=limit, total=total.scalar_one())
