from uuid import UUID
from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.store import execute, flush
from vidshare.models.user import User


async def get_user_by_id(session: AsyncSession, user_id: UUID, timeout: float | None = None) -> User | None:
    result = await execute(session, select(User).where(User.id == user_id), timeout)
    return result.scalars().one_or_none()


async def get_user_by_login(session: AsyncSession, username: str | None, email: str | None) -> User | None:
    """Find a user by username or email, whichever was supplied."""
    conditions = []
    if username:
        conditions.append(User.username == username.strip().lower())
    if email:
        conditions.append(User.email == email.strip().lower())
    if not conditions:
        return None
    result = await execute(session, select(User).where(or_(*conditions)).limit(1))
    return result.scalars().first()


async def exists_user_with(session: AsyncSession, username: str, email: str) -> bool:
    result = await execute(
        session,
        select(User.id).where(or_(User.username == username, User.email == email)).limit(1),
    )
    return result.scalars().first() is not None


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    full_name: str,
    password_hash: str,
    avatar: str,
    cover_image: str | None = None,
) -> User:
    user = User(
        username=username,
        email=email,
        full_name=full_name,
        password_hash=password_hash,
        avatar=avatar,
        cover_image=cover_image,
    )
    session.add(user)
    await flush(session)
    return user


async def update_user(session: AsyncSession, user: User, **fields) -> User:
    for key, value in fields.items():
        setattr(user, key, value)
    await flush(session)
    return user


async def set_refresh_token_hash(
    session: AsyncSession, user_id: UUID, token_hash: str | None, timeout: float | None = None
) -> None:
    await execute(
        session,
        update(User)
        .where(User.id == user_id)
        .values(refresh_token_hash=token_hash),
        timeout,
    )


async def swap_refresh_token_hash(
    session: AsyncSession,
    user_id: UUID,
    expected_hash: str,
    new_hash: str,
    timeout: float | None = None,
) -> bool:
    """Replace the stored hash only if it still equals ``expected_hash``.

    Single conditional UPDATE, so of two rotations racing on the same token
    exactly one sees a matched row.
    """
    result = await execute(
        session,
        update(User)
        .where(User.id == user_id, User.refresh_token_hash == expected_hash)
        .values(refresh_token_hash=new_hash),
        timeout,
    )
    return result.rowcount == 1
