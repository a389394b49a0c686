from uuid import UUID
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.dependencies import get_current_user
from vidshare.models.user import User
from vidshare.schemas.channel import ToggleResponse
from vidshare.schemas.video import LikedVideo
from vidshare.services import graph_service, toggle_service
from vidshare.services.toggle_service import TargetKind, ToggleResult

router = APIRouter()

TOGGLE_RESPONSES = {
    status.HTTP_201_CREATED: {"model": ToggleResponse, "description": "Relation created"},
    status.HTTP_204_NO_CONTENT: {"description": "Relation deleted"},
}


def toggle_response(result: ToggleResult) -> Response:
    if result is ToggleResult.created:
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=ToggleResponse(created=True).model_dump(by_alias=True),
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def _toggle_like(db: AsyncSession, user: User, kind: TargetKind, target_id: UUID) -> Response:
    result = await toggle_service.toggle(db, user.id, kind, target_id)
    await db.commit()
    return toggle_response(result)


@router.post("/toggle/v/{video_id}", responses=TOGGLE_RESPONSES)
async def toggle_video_like(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _toggle_like(db, current_user, TargetKind.video, video_id)


@router.post("/toggle/c/{comment_id}", responses=TOGGLE_RESPONSES)
async def toggle_comment_like(
    comment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _toggle_like(db, current_user, TargetKind.comment, comment_id)


@router.post("/toggle/t/{tweet_id}", responses=TOGGLE_RESPONSES)
async def toggle_tweet_like(
    tweet_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _toggle_like(db, current_user, TargetKind.tweet, tweet_id)


@router.get("/videos", response_model=list[LikedVideo])
async def get_liked_videos(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await graph_service.liked_videos(db, current_user.id)
