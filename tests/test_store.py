"""
Tests for bounded store access.
"""

import asyncio

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from vidshare.db.store import bounded, execute
from vidshare.errors import Unavailable


class TestBounded:
    """Slow or unreachable store calls surface as Unavailable."""

    async def test_result_passes_through(self):
        async def answer():
            return 42

        assert await bounded(answer(), timeout=1) == 42

    async def test_timeout(self):
        with pytest.raises(Unavailable):
            await bounded(asyncio.sleep(1), timeout=0.01)

    async def test_operational_error(self):
        async def unreachable():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        with pytest.raises(Unavailable):
            await bounded(unreachable())

    async def test_integrity_error_is_not_unavailable(self):
        async def duplicate():
            raise IntegrityError("INSERT", {}, Exception("unique violation"))

        with pytest.raises(IntegrityError):
            await bounded(duplicate())

    async def test_execute_uses_session(self, session):
        result = await execute(session, text("SELECT 1"))
        assert result.scalar_one() == 1
