"""
Optional async Postgres mirror for podcast jobs.

Redis holds the live job documents. When DATABASE_URL is set
(postgresql+asyncpg://...), every job write is mirrored into Postgres so job
history survives Redis eviction. Without it `db_enabled` is False and the
mirror is skipped.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

DATABASE_URL = os.getenv("DATABASE_URL")

db_enabled: bool = bool(DATABASE_URL)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine, _session_factory
    if not db_enabled or DATABASE_URL is None:
        raise RuntimeError("DATABASE_URL not configured")
    if _engine is None:
        _engine = create_async_engine(DATABASE_URL, future=True, echo=False)
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async session; raises RuntimeError when the mirror is disabled."""
    get_engine()
    assert _session_factory is not None
    async with _session_factory() as session:
        yield session


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
