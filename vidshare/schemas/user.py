from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, field_validator

from vidshare.schemas.base import CamelModel


class UserRegister(CamelModel):
    full_name: str
    email: EmailStr
    username: str
    password: str
    avatar: str
    cover_image: str | None = None

    @field_validator("full_name", "username", "password", "avatar")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("All fields are required")
        return value.strip()


class AccountUpdate(CamelModel):
    full_name: str | None = None
    email: EmailStr | None = None


class ImageUpdate(CamelModel):
    url: str


class UserResponse(CamelModel):
    """Public user fields. Password and refresh material are never part of it."""

    id: UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None = None
    created_at: datetime


class OwnerSummary(CamelModel):
    id: UUID
    username: str
    full_name: str
    avatar: str
