from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from vidshare.schemas.base import CamelModel
from vidshare.schemas.user import OwnerSummary


class TweetBody(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Tweet can't be empty")
        return value.strip()


class TweetResponse(CamelModel):
    id: UUID
    owner_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime


class TweetWithOwner(TweetResponse):
    owner: OwnerSummary | None = None
    likes_count: int
