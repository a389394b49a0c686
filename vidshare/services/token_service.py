"""Issue, verify, rotate and revoke the access/refresh credential pair.

Access tokens are stateless and stay valid until they expire. Refresh tokens
are single-use: the user row holds the digest of the only one that may still
be exchanged, and every exchange overwrites it with a compare-and-swap.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.repositories import user_repo
from vidshare.errors import IdentityNotFound, TokenReused, Unauthorized
from vidshare.models.user import User
from vidshare.services.auth_service import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_token,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _mint_pair(user: User) -> TokenPair:
    access_token = create_access_token(
        data={"sub": str(user.id), "username": user.username, "email": user.email}
    )
    refresh_token = create_refresh_token(data={"sub": str(user.id)})
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def _subject(payload: dict | None) -> UUID:
    if not payload or "sub" not in payload:
        raise Unauthorized("Invalid or expired token")
    try:
        return UUID(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token")


async def issue_pair(session: AsyncSession, user: User, timeout: float | None = None) -> TokenPair:
    """Mint a new pair and make its refresh token the only rotatable one."""
    pair = _mint_pair(user)
    await user_repo.set_refresh_token_hash(session, user.id, hash_token(pair.refresh_token), timeout)
    logger.info(f"Issued credentials for user {user.id}")
    return pair


async def verify_access(session: AsyncSession, token: str | None, timeout: float | None = None) -> User:
    """Resolve an access token to its user.

    Raises ``Unauthorized`` for a missing, malformed, expired or forged token
    (a refresh token is also rejected here) and ``IdentityNotFound`` when the
    user it names no longer exists.
    """
    if not token:
        raise Unauthorized("Unauthorized request")
    user_id = _subject(decode_access_token(token))
    user = await user_repo.get_user_by_id(session, user_id, timeout)
    if not user:
        logger.warning(f"Access token for unknown user {user_id}")
        raise IdentityNotFound()
    return user


async def rotate(session: AsyncSession, refresh_token: str | None, timeout: float | None = None) -> tuple[User, TokenPair]:
    if not refresh_token:
        raise Unauthorized("Unauthorized request")
    user_id = _subject(decode_refresh_token(refresh_token))
    user = await user_repo.get_user_by_id(session, user_id, timeout)
    if not user:
        raise IdentityNotFound("Invalid refresh token")

    pair = _mint_pair(user)
    swapped = await user_repo.swap_refresh_token_hash(
        session, user.id, hash_token(refresh_token), hash_token(pair.refresh_token), timeout
    )
    if not swapped:
        logger.warning(f"Rejected superseded refresh token for user {user.id}")
        raise TokenReused()
    logger.info(f"Rotated credentials for user {user.id}")
    return user, pair


async def revoke(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> None:
    await user_repo.set_refresh_token_hash(session, user_id, None, timeout)
    logger.info(f"Revoked refresh credential for user {user_id}")
