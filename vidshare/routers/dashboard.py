from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.dependencies import get_current_user
from vidshare.models.user import User
from vidshare.schemas.channel import ChannelStats
from vidshare.schemas.video import VideoWithOwner
from vidshare.services import graph_service

router = APIRouter()


@router.get("/stats", response_model=ChannelStats)
async def get_channel_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await graph_service.channel_stats(db, current_user.id)


@router.get("/videos", response_model=list[VideoWithOwner])
async def get_channel_videos(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await graph_service.channel_videos(db, current_user.id)
