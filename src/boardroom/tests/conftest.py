# src/boardroom/tests/conftest.py
from __future__ import annotations

import os
import sys
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("TESTING", "1")

from boardroom.db.models import Base  # noqa: E402
from boardroom.repositories import ProfileRepository  # noqa: E402
from boardroom.voting.service import VotingService  # noqa: E402


# =========================
# Logging -> stdout
# =========================
@pytest.fixture(scope="session", autouse=True)
def _tests_log_to_stdout():
    root = logging.getLogger()
    if not any(getattr(h, "stream", None) is sys.stdout for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(os.getenv("TEST_LOG_LEVEL", "INFO").upper())


# Make anyio run on asyncio (so our async fixtures work everywhere)
@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


# ==============================================================
# Database: one in-memory SQLite per test
# ==============================================================

@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(eng.sync_engine, "connect")
    def _fk_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def sessionmaker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(sessionmaker):
    async with sessionmaker() as s:
        yield s


# ==============================================================
# Clock / notifier doubles
# ==============================================================

class FrozenClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kw: Any) -> datetime:
        self.current = self.current + timedelta(**kw)
        return self.current


class RecordingNotifier:
    def __init__(self):
        self.payloads: list[dict] = []
        self.fail = False

    async def notify(self, payload: dict) -> None:
        if self.fail:
            raise RuntimeError("notifier down")
        self.payloads.append(payload)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(session, notifier, clock):
    return VotingService(session, notifier, clock=clock, eligible_roles=("admin", "board_member"))


@pytest.fixture
def make_profile(session):
    counter = {"n": 0}

    async def _make(role: str = "board_member", is_active: bool = True, **kw: Any):
        counter["n"] += 1
        kw.setdefault("email", f"member{counter['n']}@board.test")
        profile = await ProfileRepository(session).create(role=role, is_active=is_active, **kw)
        await session.commit()
        return profile

    return _make


@pytest.fixture
async def board(make_profile):
    """
    Ids of four eligible voters; a secretary and a viewer exist but may not vote.
    Plain ids survive the session expiring its objects after a rollback.
    """
    voters = [await make_profile("admin")] + [await make_profile() for _ in range(3)]
    await make_profile("secretary")
    await make_profile("viewer")
    return [v.id for v in voters]


# ==============================================================
# HTTP client against the real app, DB swapped for SQLite
# ==============================================================

@pytest.fixture
def app(sessionmaker, notifier):
    from boardroom.api.deps import get_notifier
    from boardroom.db.session import get_db
    from boardroom.main import create_app

    application = create_app()

    async def _get_db():
        async with sessionmaker() as s:
            try:
                yield s
            except Exception:
                await s.rollback()
                raise

    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_notifier] = lambda: notifier
    return application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
