"""Bounded access to the relation store.

Every awaited statement goes through :func:`bounded` so a slow or unreachable
database surfaces as ``Unavailable`` instead of hanging the request. The
caller's transaction is left for ``get_db`` to roll back, so a timed-out
toggle or rotation never commits half of its work.
"""
import asyncio
import logging
from typing import Awaitable, TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.config import settings
from vidshare.errors import Unavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], timeout: float | None = None) -> T:
    limit = settings.store_timeout_seconds if timeout is None else timeout
    try:
        return await asyncio.wait_for(awaitable, limit)
    except asyncio.TimeoutError:
        logger.warning(f"Store operation exceeded {limit:.2f}s")
        raise Unavailable()
    except (OperationalError, InterfaceError) as e:
        logger.error(f"Store unreachable: {e.__class__.__name__}")
        raise Unavailable()
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.error("Store connection invalidated")
            raise Unavailable()
        raise


async def execute(session: AsyncSession, statement, timeout: float | None = None):
    return await bounded(session.execute(statement), timeout)


async def flush(session: AsyncSession, timeout: float | None = None) -> None:
    await bounded(session.flush(), timeout)
