"""Celery application for background editorial work."""

from celery import Celery
from celery.schedules import crontab

from .celery_client import SCHEDULED_VALUE_FINDS_TASK, editorial_task_routes
from .config import settings
from .logging_config import configure_logging

configure_logging(service="editorial-worker", environment=settings.environment)

celery_app = Celery(
    "editorial",
    broker=settings.celery_broker,
    backend=settings.celery_backend,
    include=[
        "editorial.tasks.bulk_completion_generation",
        "editorial.tasks.scheduled_value_finds",
    ],
)

celery_app.conf.update(
    task_default_queue=settings.celery_default_queue,
    task_routes=editorial_task_routes(),
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=3600,  # 1 hour max per task
    task_soft_time_limit=3300,
    result_expires=86400,
    beat_schedule={
        "scheduled-value-finds": {
            "task": SCHEDULED_VALUE_FINDS_TASK,
            "schedule": crontab(minute="*/5"),
        },
    },
)
