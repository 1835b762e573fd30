# src/boardroom/db/session.py
from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, AsyncGenerator

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from boardroom.core.config import settings

# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------

DATABASE_URL: str | URL = settings.DATABASE_URL

# Use NullPool in tests (or when explicitly requested) to avoid sharing the same
# asyncpg connection across threads/tasks (common with TestClient).
USE_NULLPOOL = (
    os.getenv("SQLALCHEMY_NULLPOOL", "0") == "1"
    or bool(getattr(settings, "TESTING", False))
)

_engine_kwargs: dict = {
    "echo": bool(getattr(settings, "DB_ECHO", False)),
    "pool_pre_ping": True,  # protects against stale connections
}

if USE_NULLPOOL:
    _engine_kwargs["poolclass"] = NullPool

# Engine and sessionmaker are built lazily so importing this module never
# needs a database driver.
_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Expose the engine (e.g., for health checks / pings)."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(DATABASE_URL, **_engine_kwargs)
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return the app-wide async sessionmaker."""
    global _sessionmaker
    if _sessionmaker is None:
        _sessionmaker = async_sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            class_=AsyncSession,
        )
    return _sessionmaker


async def dispose_engine() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None

# ---------------------------------------------------------------------------
# Session helpers
#   - session_scope: async context manager (use with `async with`)
#   - get_db: async generator (use with `Depends(get_db)`)
# ---------------------------------------------------------------------------

@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with get_sessionmaker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_sessionmaker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
