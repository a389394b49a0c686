from vidshare.db.session import get_db, async_session_maker
from vidshare.db.base import Base

__all__ = ["get_db", "async_session_maker", "Base"]
