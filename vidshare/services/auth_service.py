import hashlib
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from vidshare.config import settings

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def hash_token(token: str) -> str:
    """Digest stored on the user row; comparable with a plain equality check."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _secret_for(token_type: str) -> str:
    return settings.access_token_secret if token_type == ACCESS else settings.refresh_token_secret


def create_token(data: dict, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + expires_delta,
    })
    return jwt.encode(to_encode, _secret_for(token_type), algorithm=settings.algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return create_token(data, ACCESS, expires_delta)


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return create_token(data, REFRESH, expires_delta)


def decode_token(token: str, token_type: str) -> dict | None:
    """Return the payload of a valid, unexpired token of the given type, else None."""
    try:
        payload = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[settings.algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def decode_access_token(token: str) -> dict | None:
    return decode_token(token, ACCESS)


def decode_refresh_token(token: str) -> dict | None:
    return decode_token(token, REFRESH)
