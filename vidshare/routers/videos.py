from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.db.store import bounded
from vidshare.db.repositories import video_repo
from vidshare.dependencies import get_current_user, get_optional_user
from vidshare.errors import NotFound
from vidshare.models.user import User
from vidshare.schemas.video import VideoCreate, VideoPage, VideoResponse, VideoUpdate
from vidshare.services import graph_service

router = APIRouter()


@router.get("", response_model=VideoPage)
async def list_videos(
    page: int = Query(1),
    limit: int = Query(10),
    query: str | None = Query(None),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_type: str = Query("desc", alias="sortType"),
    user_id: UUID | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    return await graph_service.list_videos(db, page, limit, query, sort_by, sort_type, user_id)


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def publish_video(
    body: VideoCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await video_repo.create_video(
        db,
        owner_id=current_user.id,
        title=body.title,
        description=body.description,
        video_file=body.video_file,
        thumbnail=body.thumbnail,
        duration=body.duration,
        is_published=body.is_published,
    )
    await db.commit()
    return video


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
):
    """Fetch a video and count the view; signed-in viewers get it added to their history."""
    video = await video_repo.get_video_by_id(db, video_id)
    if not video or (not video.is_published and (viewer is None or viewer.id != video.owner_id)):
        raise NotFound("Video not found")
    await video_repo.record_view(db, video.id, viewer.id if viewer else None)
    await db.commit()
    await bounded(db.refresh(video))
    return video


@router.patch("/{video_id}", response_model=VideoResponse)
async def update_video(
    video_id: UUID,
    body: VideoUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await video_repo.get_owned_video(db, video_id, current_user.id)
    if not video:
        raise NotFound("Video not found")
    video = await video_repo.update_video(
        db, video, title=body.title, description=body.description, thumbnail=body.thumbnail
    )
    await db.commit()
    return video


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await video_repo.get_owned_video(db, video_id, current_user.id)
    if not video:
        raise NotFound("Video not found")
    await video_repo.delete_video(db, video)
    await db.commit()


@router.patch("/toggle/publish/{video_id}", response_model=VideoResponse)
async def toggle_publish_status(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await video_repo.get_owned_video(db, video_id, current_user.id)
    if not video:
        raise NotFound("Video not found")
    video = await video_repo.update_video(db, video, is_published=not video.is_published)
    await db.commit()
    return video
