import logging

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from vidshare.config import settings
from vidshare.errors import AppError

logger = logging.getLogger(__name__)

# Connection checkout shares the per-statement bound of vidshare.db.store
engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
    pool_timeout=settings.store_timeout_seconds,
)

async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db():
    """Request-scoped session: committed when the handler returns, rolled back on any error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            if not isinstance(e, AppError):
                logger.warning(f"Rolled back request transaction after {e.__class__.__name__}")
            raise
