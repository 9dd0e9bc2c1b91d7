"""
Database sessions for the provision tracker.

Production runs on PostgreSQL behind a transaction pooler; tests
override get_db with an in-memory aiosqlite engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.config import settings

logger = logging.getLogger(__name__)

# asyncpg needs the statement cache disabled behind a transaction pooler
connect_args = {}
if settings.database_url.startswith("postgresql+asyncpg"):
    connect_args["statement_cache_size"] = 0

# NullPool: connections are pooled by the external pooler, not in-process
engine = create_async_engine(
    settings.database_url,
    poolclass=NullPool,
    echo=not settings.is_production,  # SQL logging in dev
    connect_args=connect_args,
)
logger.info(f"Database engine configured ({engine.dialect.name})")

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Commits when the request handler returns and rolls back on any
    exception, so a failed credit-back never leaves a partial update.
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
    Session for the expiry scan job and startup rule seeding. Same
    commit or rollback behaviour as get_db.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
