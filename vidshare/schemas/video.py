from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from vidshare.schemas.base import CamelModel
from vidshare.schemas.user import OwnerSummary


class VideoCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = ""
    video_file: str = Field(min_length=1)
    thumbnail: str = Field(min_length=1)
    duration: float = Field(default=0.0, ge=0)
    is_published: bool = True

    @field_validator("title", "video_file", "thumbnail")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Field cannot be empty")
        return value.strip()


class VideoUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    thumbnail: str | None = Field(default=None, min_length=1)

    @field_validator("title", "thumbnail")
    @classmethod
    def not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("Field cannot be empty")
        return value.strip() if value is not None else None


class VideoResponse(CamelModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime


class VideoWithOwner(VideoResponse):
    owner: OwnerSummary | None = None


class WatchHistoryItem(CamelModel):
    watched_at: datetime
    video: VideoWithOwner


class LikedVideo(CamelModel):
    like_id: UUID
    liked_at: datetime
    video: VideoWithOwner


class VideoPage(CamelModel):
    items: list[VideoWithOwner]
    page: int
    limit: int
    total: int
