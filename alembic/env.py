"""Alembic environment: runs migrations with a sync psycopg2 engine."""
import logging
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from vidshare.config import settings
from vidshare.db.base import Base
import vidshare.models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger("alembic.env")

config = context.config

# Migrations run synchronously; swap the asyncpg driver for psycopg2
database_url = settings.database_url.replace("+asyncpg", "", 1)
logger.info(f"Connecting to database: {database_url.split('@')[1] if '@' in database_url else 'unknown'}")
config.set_main_option("sqlalchemy.url", database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to the script output without connecting."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
