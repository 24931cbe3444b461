"""Database models and session management.

The service talks to two databases: the content database it owns
(completions, configs, schedules, picks, jobs) and the upstream feed
database it only reads.

Import models from their respective modules:
    from editorial.db.content import Completion, CompletionConfig
    from editorial.db.picks import EditorPick

Session management:
    from editorial.db import AsyncSession, get_db, feed_session_factory
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .base import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

from ..config import settings

CONTENT = "content"
FEED = "feed"

# Engines are created on first use so tests can import modules without
# opening a connection. Keyed by CONTENT / FEED.
_engines: dict[str, "AsyncEngine"] = {}
_session_factories: dict[str, async_sessionmaker[AsyncSession]] = {}


def _database_url(name: str) -> str:
    return settings.feed_database_url if name == FEED else settings.database_url


def make_session_factory(engine: "AsyncEngine", name: str = CONTENT) -> async_sessionmaker[AsyncSession]:
    """Content sessions flush only on commit; feed sessions are read-only."""
    if name == FEED:
        return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def _get_engine(name: str) -> "AsyncEngine":
    if name not in _engines:
        _engines[name] = create_async_engine(
            _database_url(name), echo=settings.sql_echo, future=True
        )
    return _engines[name]


def _get_session_factory(name: str = CONTENT) -> async_sessionmaker[AsyncSession]:
    if name not in _session_factories:
        _session_factories[name] = make_session_factory(_get_engine(name), name)
    return _session_factories[name]


def feed_session_factory() -> async_sessionmaker[AsyncSession]:
    """Process-wide session factory for the feed database."""
    return _get_session_factory(FEED)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for content sessions with commit/rollback semantics."""
    session_factory = _get_session_factory(CONTENT)
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def task_session_factories() -> AsyncIterator[
    tuple[async_sessionmaker[AsyncSession], async_sessionmaker[AsyncSession]]
]:
    """Engines scoped to one Celery task run.

    Each task runs its coroutine under ``asyncio.run``; pooled connections
    cannot outlive that loop, so the engines are disposed on exit.
    """
    engines = {
        name: create_async_engine(_database_url(name), echo=False, future=True)
        for name in (CONTENT, FEED)
    }
    try:
        yield (
            make_session_factory(engines[CONTENT], CONTENT),
            make_session_factory(engines[FEED], FEED),
        )
    finally:
        for engine in engines.values():
            await engine.dispose()


async def close_db() -> None:
    """Dispose the content and feed engines."""
    for name in list(_engines):
        engine = _engines.pop(name)
        _session_factories.pop(name, None)
        await engine.dispose()


__all__ = [
    "Base",
    "AsyncSession",
    "CONTENT",
    "FEED",
    "close_db",
    "feed_session_factory",
    "get_db",
    "make_session_factory",
    "task_session_factories",
]
