from datetime import datetime
from uuid import UUID

from vidshare.schemas.base import CamelModel
from vidshare.schemas.user import OwnerSummary


class ChannelProfile(CamelModel):
    id: UUID
    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: str | None = None
    created_at: datetime
    subscriber_count: int
    subscribed_count: int
    is_subscribed_by_viewer: bool


class SubscriberEntry(CamelModel):
    subscribed_at: datetime
    user: OwnerSummary


class SubscribedChannel(CamelModel):
    subscribed_at: datetime
    channel: OwnerSummary
    subscriber_count: int


class ChannelStats(CamelModel):
    total_views: int
    total_subscribers: int
    total_videos: int
    total_likes: int


class ToggleResponse(CamelModel):
    created: bool
