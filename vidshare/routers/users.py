import logging

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.config import settings
from vidshare.db.session import get_db
from vidshare.db.repositories import user_repo
from vidshare.dependencies import ACCESS_COOKIE, REFRESH_COOKIE, get_current_user, get_optional_user
from vidshare.errors import Conflict, InvalidInput, Unauthorized
from vidshare.models.user import User
from vidshare.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse, RefreshRequest, TokenResponse
from vidshare.schemas.channel import ChannelProfile
from vidshare.schemas.user import AccountUpdate, ImageUpdate, UserRegister, UserResponse
from vidshare.schemas.video import WatchHistoryItem
from vidshare.services import graph_service, token_service
from vidshare.services.auth_service import hash_password, verify_password
from vidshare.services.token_service import TokenPair

logger = logging.getLogger(__name__)

router = APIRouter()


def set_auth_cookies(response: Response, pair: TokenPair) -> None:
    options = {"httponly": True, "secure": settings.cookie_secure, "samesite": "lax"}
    response.set_cookie(
        ACCESS_COOKIE, pair.access_token, max_age=settings.access_token_expire_minutes * 60, **options
    )
    response.set_cookie(
        REFRESH_COOKIE, pair.refresh_token, max_age=settings.refresh_token_expire_days * 24 * 3600, **options
    )


def clear_auth_cookies(response: Response) -> None:
    options = {"httponly": True, "secure": settings.cookie_secure, "samesite": "lax"}
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(body: UserRegister, db: AsyncSession = Depends(get_db)):
    username = body.username.lower()
    email = body.email.lower()
    if await user_repo.exists_user_with(db, username, email):
        raise Conflict("User with email or username already exists")
    try:
        user = await user_repo.create_user(
            db,
            username=username,
            email=email,
            full_name=body.full_name,
            password_hash=hash_password(body.password),
            avatar=body.avatar,
            cover_image=body.cover_image,
        )
    except IntegrityError:
        raise Conflict("User with email or username already exists")
    await db.commit()
    logger.info(f"Registered user {user.id}")
    return user


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user = await user_repo.get_user_by_login(db, body.username, body.email)
    if not user or not verify_password(body.password, user.password_hash):
        logger.warning("Rejected login attempt")
        raise Unauthorized("Invalid user credentials")
    pair = await token_service.issue_pair(db, user)
    await db.commit()
    set_auth_cookies(response, pair)
    return LoginResponse(
        user=UserResponse.model_validate(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )


@router.post("/logout")
async def logout(
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await token_service.revoke(db, current_user.id)
    await db.commit()
    clear_auth_cookies(response)
    return {}


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    response: Response,
    body: RefreshRequest | None = None,
    refresh_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    db: AsyncSession = Depends(get_db),
):
    """Exchange a refresh token (cookie first, then body) for a new pair."""
    incoming = refresh_cookie or (body.refresh_token if body else None)
    _, pair = await token_service.rotate(db, incoming)
    await db.commit()
    set_auth_cookies(response, pair)
    return TokenResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(body.old_password, current_user.password_hash):
        raise InvalidInput("Invalid old password")
    if not body.new_password.strip():
        raise InvalidInput("New password cannot be empty")
    await user_repo.update_user(db, current_user, password_hash=hash_password(body.new_password))
    await token_service.revoke(db, current_user.id)
    await db.commit()
    return {}


@router.get("/current-user", response_model=UserResponse)
async def get_current_account(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/update-account", response_model=UserResponse)
async def update_account(
    body: AccountUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fields = {}
    if body.full_name is not None:
        if not body.full_name.strip():
            raise InvalidInput("Full name cannot be empty")
        fields["full_name"] = body.full_name.strip()
    if body.email is not None:
        fields["email"] = body.email.lower()
    if not fields:
        raise InvalidInput("Nothing to update")
    try:
        user = await user_repo.update_user(db, current_user, **fields)
    except IntegrityError:
        raise Conflict("Email is already in use")
    await db.commit()
    return user


@router.patch("/avatar", response_model=UserResponse)
async def update_avatar(
    body: ImageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not body.url.strip():
        raise InvalidInput("Avatar file is missing")
    user = await user_repo.update_user(db, current_user, avatar=body.url.strip())
    await db.commit()
    return user


@router.patch("/cover-image", response_model=UserResponse)
async def update_cover_image(
    body: ImageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not body.url.strip():
        raise InvalidInput("Cover image file is missing")
    user = await user_repo.update_user(db, current_user, cover_image=body.url.strip())
    await db.commit()
    return user


@router.get("/c/{username}", response_model=ChannelProfile)
async def get_channel_profile(
    username: str,
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
):
    return await graph_service.channel_profile(db, username, viewer.id if viewer else None)


@router.get("/history", response_model=list[WatchHistoryItem])
async def get_watch_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await graph_service.watch_history(db, current_user.id)

