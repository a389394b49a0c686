from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from vidshare.schemas.base import CamelModel
from vidshare.schemas.user import OwnerSummary
from vidshare.schemas.video import VideoWithOwner


class PlaylistCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str = ""

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Playlist name cannot be empty")
        return value.strip()


class PlaylistUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("Playlist name cannot be empty")
        return value.strip() if value is not None else None


class PlaylistResponse(CamelModel):
    id: UUID
    owner_id: UUID
    name: str
    description: str
    created_at: datetime
    updated_at: datetime


class PlaylistSummary(PlaylistResponse):
    owner: OwnerSummary | None = None
    total_videos: int


class PlaylistEntry(CamelModel):
    """One slot; ``video`` is None and ``available`` False once the video is gone."""

    position: int
    video_id: UUID
    available: bool
    video: VideoWithOwner | None = None


class PlaylistDetail(PlaylistResponse):
    owner: OwnerSummary | None = None
    videos: list[PlaylistEntry]
