"""Async engine and transactional sessions for the fixture store.

One engine per process, built from DATABASE_URL on first use. The CLI
disposes it with ``close_db()`` at the end of every command.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from fixtureid.config import get_config
from fixtureid.db.models import Base

logger = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db = get_config().db
        _engine = create_async_engine(db.url, echo=db.echo)
        logger.debug("db_engine_created", dialect=_engine.dialect.name)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _sessions
    if _sessions is None:
        _sessions = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _sessions


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """One store's transaction: commit on clean exit, roll back on any error.

    Repository calls only flush, so a plan's inserts and STORAGE moves land
    together or not at all.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(drop: bool = False) -> None:
    """Create the store_fixture_ids table (dropping it first if asked)."""
    async with get_engine().begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db_initialized", dropped=drop, tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    global _engine, _sessions
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessions = None
