from pydantic import model_validator

from vidshare.schemas.base import CamelModel
from vidshare.schemas.user import UserResponse


class LoginRequest(CamelModel):
    username: str | None = None
    email: str | None = None
    password: str

    @model_validator(mode="after")
    def check_identifier(self):
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    user: UserResponse
