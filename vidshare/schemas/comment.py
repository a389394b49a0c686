from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from vidshare.schemas.base import CamelModel


class CommentBody(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment content cannot be empty")
        return value.strip()


class CommentResponse(CamelModel):
    id: UUID
    owner_id: UUID
    video_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime


class CommentAuthor(CamelModel):
    id: UUID
    username: str
    avatar: str


class CommentWithLikes(CamelModel):
    id: UUID
    video_id: UUID
    content: str
    created_at: datetime
    owner: CommentAuthor | None = None
    likes_count: int


class CommentPage(CamelModel):
    items: list[CommentWithLikes]
    page: int
    page_size: int
    total: int
