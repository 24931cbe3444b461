"""Celery client used by the API to dispatch editorial tasks.

The API never imports the task modules; it sends by name. Names and
routes live here so the API and the worker agree on them.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from celery import Celery

from .config import settings

logger = logging.getLogger(__name__)

BULK_GENERATION_TASK = "run_bulk_completion_generation"
SCHEDULED_VALUE_FINDS_TASK = "run_scheduled_value_finds"


class TaskDispatchError(RuntimeError):
    """The broker did not accept a task."""


def editorial_task_routes() -> dict[str, dict[str, Any]]:
    queue = settings.celery_default_queue
    return {
        BULK_GENERATION_TASK: {"queue": queue, "routing_key": queue},
        SCHEDULED_VALUE_FINDS_TASK: {"queue": queue, "routing_key": queue},
    }


@lru_cache(maxsize=1)
def get_celery_app() -> Celery:
    app = Celery(
        "editorial-api",
        broker=settings.celery_broker,
        backend=settings.celery_backend,
    )
    app.conf.task_default_queue = settings.celery_default_queue
    app.conf.task_routes = editorial_task_routes()
    app.conf.task_always_eager = False
    app.conf.task_eager_propagates = True
    # No publish retries inside a request.
    app.conf.task_publish_retry = False
    return app


def dispatch_bulk_generation(job_id: int) -> str:
    """Queue a bulk generation run for a job row. Returns the Celery task id."""
    try:
        result = get_celery_app().send_task(BULK_GENERATION_TASK, args=[job_id])
    except Exception as exc:
        logger.error("celery_dispatch_failed", extra={"task": BULK_GENERATION_TASK, "error": str(exc)})
        raise TaskDispatchError(f"Could not queue {BULK_GENERATION_TASK}: {exc}") from exc
    return result.id
