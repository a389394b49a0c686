import logging

from fastapi import Cookie, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.errors import Unauthorized
from vidshare.models.user import User
from vidshare.services import token_service

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

security = HTTPBearer(auto_error=False)


def extract_access_token(
    credentials: HTTPAuthorizationCredentials | None, cookie_token: str | None
) -> str | None:
    """Bearer header wins over the cookie when both are present."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return cookie_token or None


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    access_cookie: str | None = Cookie(default=None, alias=ACCESS_COOKIE),
) -> User:
    token = extract_access_token(credentials, access_cookie)
    return await token_service.verify_access(db, token)


async def get_optional_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    access_cookie: str | None = Cookie(default=None, alias=ACCESS_COOKIE),
) -> User | None:
    """Viewer for public views: anonymous when no usable access token is presented."""
    token = extract_access_token(credentials, access_cookie)
    if not token:
        return None
    try:
        return await token_service.verify_access(db, token)
    except Unauthorized:
        logger.debug("Ignoring unusable access token on a public view")
        return None
