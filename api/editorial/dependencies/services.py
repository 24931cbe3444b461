"""Service providers for routers. Tests swap these via ``app.dependency_overrides``."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from ..catalog import GameCatalog, SqlFeedSource
from ..db import AsyncSession, get_db
from ..services.content_store import ContentStore, SqlContentStore
from ..services.generation import GenerationAdapter
from ..services.generation import get_generation_adapter as _shared_adapter


async def get_content_store(session: AsyncSession = Depends(get_db)) -> ContentStore:
    return SqlContentStore(session)


@lru_cache(maxsize=1)
def get_catalog() -> GameCatalog:
    """One catalog per process so college branding tables load once."""
    return GameCatalog(SqlFeedSource())


def get_generation_adapter() -> GenerationAdapter:
    return _shared_adapter()
