from uuid import UUID
from sqlalchemy import select, update, insert
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.store import execute, flush
from vidshare.models.video import Video
from vidshare.models.watch_history import WatchHistoryEntry


async def get_video_by_id(session: AsyncSession, video_id: UUID) -> Video | None:
    result = await execute(session, select(Video).where(Video.id == video_id))
    return result.scalars().one_or_none()


async def get_owned_video(session: AsyncSession, video_id: UUID, owner_id: UUID) -> Video | None:
    result = await execute(session, select(Video).where(Video.id == video_id, Video.owner_id == owner_id))
    return result.scalars().one_or_none()


async def create_video(
    session: AsyncSession,
    owner_id: UUID,
    title: str,
    description: str,
    video_file: str,
    thumbnail: str,
    duration: float,
    is_published: bool = True,
) -> Video:
    video = Video(
        owner_id=owner_id,
        title=title,
        description=description,
        video_file=video_file,
        thumbnail=thumbnail,
        duration=duration,
        is_published=is_published,
    )
    session.add(video)
    await flush(session)
    return video


async def update_video(session: AsyncSession, video: Video, **fields) -> Video:
    for key, value in fields.items():
        if value is not None:
            setattr(video, key, value)
    await flush(session)
    return video


async def delete_video(session: AsyncSession, video: Video) -> None:
    await session.delete(video)
    await flush(session)


async def record_view(session: AsyncSession, video_id: UUID, viewer_id: UUID | None = None) -> None:
    """Bump the view counter in place and append to the viewer's watch history."""
    await execute(
        session,
        update(Video)
        .where(Video.id == video_id)
        .values(views=Video.views + 1)
        .execution_options(synchronize_session=False),
    )
    if viewer_id is not None:
        await execute(session, insert(WatchHistoryEntry).values(user_id=viewer_id, video_id=video_id))
