"""Celery task for asynchronous bulk completion generation.

Job state lives in ``bulk_completion_jobs`` so progress survives worker
restarts and can be polled from any API process. Cancellation is a flag
on the job row, checked after every item.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from sqlalchemy import select

from ..celery_app import celery_app
from ..celery_client import BULK_GENERATION_TASK
from ..db.jobs import BulkCompletionJob, BulkJobStatus
from ..logging_config import bind_log_context
from ..services.content_store import ContentStore
from ..services.reconciliation import ItemOutcome, ItemStatus, ReconcileResult, ReconciliationEngine
from ..utils.datetime_utils import now_utc
from .runtime import task_context

logger = logging.getLogger(__name__)

MAX_RECORDED_ERRORS = 200


async def run_bulk_job(
    store: ContentStore, engine: ReconciliationEngine, job: BulkCompletionJob
) -> ReconcileResult:
    """Run reconciliation for a job row, mirroring progress onto it."""
    cancel_event = asyncio.Event()
    job_key = str(job.job_uuid)
    job.status = BulkJobStatus.running.value
    job.started_at = now_utc()
    await store.commit()
    logger.info("bulk_job_started", extra={"job_id": job_key, "sport_type": job.sport_type})

    try:
        items = await engine.plan(job.sport_type)
        job.total_items = len(items)
        await store.commit()
        await store.refresh_job(job)
        if job.cancel_requested:
            cancel_event.set()

        # Item rollbacks expire the job row; progress is only ever written to it.
        errors = list(job.errors_json or [])

        async def on_item(outcome: ItemOutcome, result: ReconcileResult) -> None:
            if outcome.status == ItemStatus.error and len(errors) < MAX_RECORDED_ERRORS:
                errors.append(
                    {
                        "sport_type": outcome.sport_type,
                        "slot_type": outcome.slot_type,
                        "game_id": outcome.game_id,
                        "error": outcome.reason,
                    }
                )
            job.generated = result.generated
            job.failed = result.errors
            job.skipped = result.skipped
            job.errors_json = list(errors)
            await store.commit()
            await store.refresh_job(job)
            if job.cancel_requested:
                cancel_event.set()

        result = await engine.reconcile(
            job.sport_type, items=items, cancel_event=cancel_event, on_item=on_item
        )
    except Exception as exc:
        logger.exception("bulk_job_failed", extra={"job_id": job_key})
        await store.rollback()
        await store.refresh_job(job)
        job.status = BulkJobStatus.failed.value
        job.finished_at = now_utc()
        job.errors_json = [*(job.errors_json or []), {"error": str(exc)}]
        await store.commit()
        raise

    job.status = (
        BulkJobStatus.cancelled.value if result.cancelled else BulkJobStatus.completed.value
    )
    job.finished_at = now_utc()
    await store.commit()
    logger.info(
        "bulk_job_finished",
        extra={
            "job_id": job_key,
            "status": job.status,
            "generated": result.generated,
            "errors": result.errors,
            "skipped": result.skipped,
        },
    )
    return result


async def _run_bulk_completion_generation_async(job_id: int) -> dict[str, Any]:
    async with task_context() as ctx:
        job = (
            await ctx.session.execute(select(BulkCompletionJob).where(BulkCompletionJob.id == job_id))
        ).scalar_one_or_none()
        if job is None:
            logger.error("bulk_job_missing", extra={"job_id": job_id})
            return {"job_id": job_id, "status": "missing"}
        if job.is_finished:
            return {"job_id": job_id, "status": job.status}

        engine = ReconciliationEngine(ctx.store, ctx.catalog, ctx.generator)
        try:
            result = await run_bulk_job(ctx.store, engine, job)
        except Exception:
            return {"job_id": job_id, "status": BulkJobStatus.failed.value}
        return {"job_id": job_id, "status": job.status, **result.to_dict()}


@celery_app.task(name=BULK_GENERATION_TASK, bind=True)
def run_bulk_completion_generation(self, job_id: int) -> dict[str, Any]:
    """Progress is tracked on the job row, not in the result backend."""
    with bind_log_context(bulk_job_row=job_id, task_id=self.request.id):
        logger.info("bulk_job_task_received")
        return asyncio.run(_run_bulk_completion_generation_async(job_id))
