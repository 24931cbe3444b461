"""Per-task service wiring.

Celery tasks run their coroutine under ``asyncio.run``, so every task
gets engines bound to that event loop (see ``task_session_factories``).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from ..catalog import GameCatalog, SqlFeedSource
from ..db import task_session_factories
from ..services.content_store import SqlContentStore
from ..services.generation import GenerationAdapter


@dataclass
class TaskContext:
    session: AsyncSession
    store: SqlContentStore
    catalog: GameCatalog
    generator: GenerationAdapter


@asynccontextmanager
async def task_context() -> AsyncIterator[TaskContext]:
    async with task_session_factories() as (session_factory, feed_factory):
        async with session_factory() as session:
            yield TaskContext(
                session=session,
                store=SqlContentStore(session),
                catalog=GameCatalog(SqlFeedSource(feed_factory)),
                generator=GenerationAdapter(),
            )
