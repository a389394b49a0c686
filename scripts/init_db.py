#!/usr/bin/env python3
"""
Prepare PostgreSQL for vidshare.

Creates the database named in DATABASE_URL when it is missing, then reports
which application tables are still absent (apply them with: alembic upgrade head).
Run from the project root: python scripts/init_db.py
"""
import os
import sys
from urllib.parse import urlparse

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"))

import psycopg2
from psycopg2 import sql
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT

from vidshare.config import settings
from vidshare.db.base import Base
import vidshare.models  # noqa: F401


def sync_dsn(database_url: str) -> dict:
    p = urlparse(database_url.replace("postgresql+asyncpg://", "postgresql://", 1))
    if not p.hostname:
        raise ValueError(f"DATABASE_URL has no host: {database_url.split('@')[-1]}")
    return {
        "host": p.hostname,
        "port": p.port or 5432,
        "user": p.username or "postgres",
        "password": p.password or "",
        "dbname": (p.path or "").strip("/").split("?")[0] or "vidshare",
    }


def ensure_database(dsn: dict) -> None:
    target = dsn["dbname"]
    conn = psycopg2.connect(**{**dsn, "dbname": "postgres"})
    conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target,))
            if cur.fetchone() is None:
                cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target)))
                print(f"Created database {target!r}")
            else:
                print(f"Database {target!r} already exists")
    finally:
        conn.close()


def missing_tables(dsn: dict) -> list[str]:
    conn = psycopg2.connect(**dsn)
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT tablename FROM pg_tables WHERE schemaname = 'public'")
            present = {row[0] for row in cur.fetchall()}
    finally:
        conn.close()
    return sorted(set(Base.metadata.tables) - present)


def main():
    try:
        dsn = sync_dsn(settings.database_url)
    except ValueError as e:
        print(e)
        sys.exit(1)

    ensure_database(dsn)
    missing = missing_tables(dsn)
    if missing:
        print(f"Missing tables: {', '.join(missing)}")
        print("Run: alembic upgrade head")
        sys.exit(2)
    print("Schema is up to date")


if __name__ == "__main__":
    main()
