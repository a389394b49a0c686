from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.dependencies import get_current_user
from vidshare.errors import InvalidInput
from vidshare.models.user import User
from vidshare.routers.likes import TOGGLE_RESPONSES, toggle_response
from vidshare.schemas.channel import SubscribedChannel, SubscriberEntry
from vidshare.services import graph_service, toggle_service
from vidshare.services.toggle_service import TargetKind

router = APIRouter()


@router.post("/c/{channel_id}", responses=TOGGLE_RESPONSES)
async def toggle_subscription(
    channel_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if channel_id == current_user.id:
        raise InvalidInput("You cannot subscribe to your own channel")
    result = await toggle_service.toggle(db, current_user.id, TargetKind.channel, channel_id)
    await db.commit()
    return toggle_response(result)


@router.get("/c/{channel_id}", response_model=list[SubscriberEntry])
async def get_channel_subscribers(channel_id: UUID, db: AsyncSession = Depends(get_db)):
    return await graph_service.channel_subscribers(db, channel_id)


@router.get("/u/{subscriber_id}", response_model=list[SubscribedChannel])
async def get_subscribed_channels(subscriber_id: UUID, db: AsyncSession = Depends(get_db)):
    return await graph_service.subscribed_channels(db, subscriber_id)
