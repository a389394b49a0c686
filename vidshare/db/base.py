"""
SQLAlchemy declarative base shared by all models.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


# Naming convention for constraints (keeps Alembic migrations deterministic)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=convention)

    def __repr__(self) -> str:
        attrs = []
        for col in self.__table__.columns:
            if col.name in ("id", "username", "name", "owner_id", "user_id"):
                attrs.append(f"{col.name}={getattr(self, col.name, None)!r}")
        return f"<{self.__class__.__name__}({', '.join(attrs)})>"
