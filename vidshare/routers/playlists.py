from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.db.repositories import playlist_repo, video_repo
from vidshare.dependencies import get_current_user
from vidshare.errors import NotFound
from vidshare.models.user import User
from vidshare.schemas.playlist import (
    PlaylistCreate,
    PlaylistDetail,
    PlaylistResponse,
    PlaylistSummary,
    PlaylistUpdate,
)
from vidshare.services import graph_service

router = APIRouter()


@router.post("", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def create_playlist(
    body: PlaylistCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await playlist_repo.create_playlist(db, current_user.id, body.name, body.description)
    await db.commit()
    return playlist


@router.get("/user/{user_id}", response_model=list[PlaylistSummary])
async def get_user_playlists(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return await graph_service.user_playlists(db, user_id)


@router.get("/{playlist_id}", response_model=PlaylistDetail)
async def get_playlist(playlist_id: UUID, db: AsyncSession = Depends(get_db)):
    return await graph_service.playlist_detail(db, playlist_id)


@router.patch("/{playlist_id}", response_model=PlaylistResponse)
async def update_playlist(
    playlist_id: UUID,
    body: PlaylistUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await playlist_repo.get_owned_playlist(db, playlist_id, current_user.id)
    if not playlist:
        raise NotFound("Playlist not found")
    playlist = await playlist_repo.update_playlist(
        db, playlist, name=body.name, description=body.description
    )
    await db.commit()
    return playlist


@router.delete("/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_playlist(
    playlist_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await playlist_repo.get_owned_playlist(db, playlist_id, current_user.id)
    if not playlist:
        raise NotFound("Playlist not found")
    await playlist_repo.delete_playlist(db, playlist)
    await db.commit()


@router.patch("/add/{video_id}/{playlist_id}", response_model=PlaylistDetail)
async def add_video_to_playlist(
    video_id: UUID,
    playlist_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await playlist_repo.get_owned_playlist(db, playlist_id, current_user.id)
    if not playlist:
        raise NotFound("Playlist not found")
    if not await video_repo.get_video_by_id(db, video_id):
        raise NotFound("Video not found")
    await playlist_repo.append_video(db, playlist, video_id)
    await db.commit()
    return await graph_service.playlist_detail(db, playlist_id)


@router.patch("/remove/{video_id}/{playlist_id}", response_model=PlaylistDetail)
async def remove_video_from_playlist(
    video_id: UUID,
    playlist_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await playlist_repo.get_owned_playlist(db, playlist_id, current_user.id)
    if not playlist:
        raise NotFound("Playlist not found")
    if not await playlist_repo.remove_video(db, playlist, video_id):
        raise NotFound("Video is not in this playlist")
    await db.commit()
    return await graph_service.playlist_detail(db, playlist_id)
