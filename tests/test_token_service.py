"""
Tests for credential issue, verification, rotation and revocation.
"""

from datetime import timedelta

import jwt
import pytest
from sqlalchemy import delete, select

from vidshare.config import settings
from vidshare.db.repositories import user_repo
from vidshare.errors import IdentityNotFound, TokenReused, Unauthorized
from vidshare.models import User
from vidshare.services import token_service
from vidshare.services.auth_service import (
    create_access_token,
    decode_access_token,
    decode_refresh_token,
    hash_token,
)


# =============================================================================
# Issue / Verify
# =============================================================================

class TestVerifyAccess:
    """verify_access accepts only live access tokens of existing users."""

    async def test_issued_access_token_resolves_to_user(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        await session.commit()

        resolved = await token_service.verify_access(session, pair.access_token)
        assert resolved.id == user.id

    async def test_issue_stores_refresh_digest(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        await session.commit()

        stored = await session.scalar(select(User.refresh_token_hash).where(User.id == user.id))
        assert stored == hash_token(pair.refresh_token)
        assert stored != pair.refresh_token

    async def test_missing_token_is_unauthorized(self, session):
        with pytest.raises(Unauthorized):
            await token_service.verify_access(session, None)

    async def test_garbage_token_is_unauthorized(self, session):
        with pytest.raises(Unauthorized):
            await token_service.verify_access(session, "not-a-jwt")

    async def test_expired_token_is_unauthorized(self, session, make_user):
        user = await make_user("alice")
        token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(Unauthorized):
            await token_service.verify_access(session, token)

    async def test_token_signed_with_other_secret_is_unauthorized(self, session, make_user):
        user = await make_user("alice")
        forged = jwt.encode(
            {"sub": str(user.id), "type": "access", "exp": 4102444800},
            "someone-elses-secret",
            algorithm=settings.algorithm,
        )
        with pytest.raises(Unauthorized):
            await token_service.verify_access(session, forged)

    async def test_refresh_token_is_not_an_access_token(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        with pytest.raises(Unauthorized):
            await token_service.verify_access(session, pair.refresh_token)

    async def test_deleted_user_is_identity_not_found(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        await session.execute(delete(User).where(User.id == user.id))
        await session.commit()

        with pytest.raises(IdentityNotFound):
            await token_service.verify_access(session, pair.access_token)


class TestTokenTypes:
    """Access and refresh tokens are not interchangeable."""

    def test_decoders_check_type(self):
        access = create_access_token({"sub": "00000000-0000-0000-0000-000000000001"})
        assert decode_access_token(access)["type"] == "access"
        assert decode_refresh_token(access) is None

    def test_tokens_carry_unique_ids(self):
        first = create_access_token({"sub": "00000000-0000-0000-0000-000000000001"})
        second = create_access_token({"sub": "00000000-0000-0000-0000-000000000001"})
        assert first != second
        assert decode_access_token(first)["jti"] != decode_access_token(second)["jti"]


# =============================================================================
# Rotate / Revoke
# =============================================================================

class TestRotate:
    """Refresh tokens are single-use."""

    async def test_rotate_returns_working_pair(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        await session.commit()

        rotated_user, new_pair = await token_service.rotate(session, pair.refresh_token)
        await session.commit()

        assert rotated_user.id == user.id
        assert new_pair.refresh_token != pair.refresh_token
        resolved = await token_service.verify_access(session, new_pair.access_token)
        assert resolved.id == user.id

    async def test_reused_refresh_token_is_rejected(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        await token_service.rotate(session, pair.refresh_token)
        await session.commit()

        with pytest.raises(TokenReused):
            await token_service.rotate(session, pair.refresh_token)

    async def test_new_login_supersedes_old_refresh_token(self, session, make_user):
        user = await make_user("alice")
        first = await token_service.issue_pair(session, user)
        second = await token_service.issue_pair(session, user)
        await session.commit()

        with pytest.raises(TokenReused):
            await token_service.rotate(session, first.refresh_token)
        _, rotated = await token_service.rotate(session, second.refresh_token)
        assert rotated.access_token

    async def test_access_token_cannot_rotate(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        with pytest.raises(Unauthorized):
            await token_service.rotate(session, pair.access_token)

    async def test_missing_refresh_token(self, session):
        with pytest.raises(Unauthorized):
            await token_service.rotate(session, "")

    async def test_revoked_refresh_token_is_rejected(self, session, make_user):
        user = await make_user("alice")
        pair = await token_service.issue_pair(session, user)
        await token_service.revoke(session, user.id)
        await session.commit()

        with pytest.raises(TokenReused):
            await token_service.rotate(session, pair.refresh_token)

    async def test_stale_swap_matches_no_row(self, session, make_user):
        user = await make_user("alice")
        await token_service.issue_pair(session, user)

        swapped = await user_repo.swap_refresh_token_hash(session, user.id, hash_token("stale"), hash_token("new"))
        assert swapped is False
