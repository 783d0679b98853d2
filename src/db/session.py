"""
Async SQLAlchemy engine and session factory.

PostgreSQL (asyncpg) in deployments, SQLite (aiosqlite) for local runs
and tests. Commission units of work open their own sessions from
AsyncSessionLocal; request handlers get one through get_db.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.config import Settings, settings

logger = logging.getLogger(__name__)


def build_engine(config: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    if config.is_sqlite:
        return create_async_engine(config.database_url, echo=False)

    # NullPool: pgbouncer-style transaction poolers sit in front of Postgres
    return create_async_engine(
        config.database_url,
        poolclass=NullPool,
        echo=not config.is_production,
        connect_args={
            "statement_cache_size": 0,  # prepared statements break behind a transaction pooler
        },
    )


engine = build_engine(settings)

# expire_on_commit=False: records returned by the coordinator outlive their session
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    Committed when the handler returns, rolled back if it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Session for code outside a request (scripts, startup tasks).

    Usage:
        async with get_db_context() as db:
            db.add(...)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
