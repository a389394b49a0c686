from datetime import datetime
from uuid import UUID
from sqlalchemy import select, delete, func, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.store import execute, flush
from vidshare.errors import Conflict
from vidshare.models.playlist import Playlist, PlaylistItem


async def get_owned_playlist(session: AsyncSession, playlist_id: UUID, owner_id: UUID) -> Playlist | None:
    result = await execute(
        session, select(Playlist).where(Playlist.id == playlist_id, Playlist.owner_id == owner_id)
    )
    return result.scalars().one_or_none()


async def create_playlist(session: AsyncSession, owner_id: UUID, name: str, description: str) -> Playlist:
    playlist = Playlist(owner_id=owner_id, name=name, description=description)
    session.add(playlist)
    await flush(session)
    return playlist


async def update_playlist(
    session: AsyncSession, playlist: Playlist, name: str | None = None, description: str | None = None
) -> Playlist:
    if name is not None:
        playlist.name = name
    if description is not None:
        playlist.description = description
    await flush(session)
    return playlist


async def delete_playlist(session: AsyncSession, playlist: Playlist) -> None:
    await session.delete(playlist)
    await flush(session)


async def append_video(session: AsyncSession, playlist: Playlist, video_id: UUID) -> None:
    """Append at the end. A concurrent append taking the same slot is a conflict."""
    next_position = (
        select(func.coalesce(func.max(PlaylistItem.position), -1) + 1)
        .where(PlaylistItem.playlist_id == playlist.id)
        .scalar_subquery()
    )
    try:
        async with session.begin_nested():
            await execute(
                session,
                insert(PlaylistItem).values(
                    playlist_id=playlist.id, video_id=video_id, position=next_position
                ),
            )
    except IntegrityError:
        raise Conflict("Playlist changed concurrently, try again")
    playlist.updated_at = datetime.utcnow()
    await flush(session)


async def remove_video(session: AsyncSession, playlist: Playlist, video_id: UUID) -> int:
    """Remove every occurrence of the video; returns how many slots were dropped."""
    result = await execute(
        session,
        delete(PlaylistItem)
        .where(PlaylistItem.playlist_id == playlist.id, PlaylistItem.video_id == video_id)
        .execution_options(synchronize_session=False),
    )
    playlist.updated_at = datetime.utcnow()
    await flush(session)
    return result.rowcount
