"""Celery beat task: fire due page-level value-find schedules."""

from __future__ import annotations

import asyncio
import logging

from ..celery_app import celery_app
from ..celery_client import SCHEDULED_VALUE_FINDS_TASK
from ..logging_config import bind_log_context
from ..services.scheduler import run_due_schedules
from .runtime import task_context

logger = logging.getLogger(__name__)


async def _run_scheduled_value_finds_async() -> dict[str, str]:
    async with task_context() as ctx:
        return await run_due_schedules(ctx.store, ctx.catalog, ctx.generator)


@celery_app.task(name=SCHEDULED_VALUE_FINDS_TASK)
def run_scheduled_value_finds() -> dict[str, str]:
    with bind_log_context(task=SCHEDULED_VALUE_FINDS_TASK):
        results = asyncio.run(_run_scheduled_value_finds_async())
    if results:
        logger.info("scheduled_value_finds_ran", extra={"results": results})
    return results
