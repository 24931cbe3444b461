"""Admin endpoints for per-game completions and bulk reconciliation."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...catalog import GameCatalog
from ...celery_client import TaskDispatchError, dispatch_bulk_generation
from ...config_sports import validate_sport_type
from ...db.jobs import BulkCompletionJob, BulkJobStatus
from ...dependencies import get_catalog, get_content_store, get_generation_adapter
from ...services.content_store import ContentStore
from ...services.generation import GenerationAdapter
from ...services.reconciliation import ReconciliationEngine
from ...utils.datetime_utils import now_utc
from ..errors import HANDLED_ERRORS, to_http_exception
from ..models import (
    BulkGenerateAsyncResponse,
    BulkGenerateRequest,
    BulkGenerateResponse,
    BulkGenerateStatusResponse,
    CompletionResponse,
    GenerateCompletionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _engine(
    store: ContentStore = Depends(get_content_store),
    catalog: GameCatalog = Depends(get_catalog),
    generator: GenerationAdapter = Depends(get_generation_adapter),
) -> ReconciliationEngine:
    return ReconciliationEngine(store, catalog, generator)


@router.post(
    "/completions/bulk-generate",
    response_model=BulkGenerateResponse,
    summary="Generate all missing completions in the upcoming window",
)
async def bulk_generate_missing_completions(
    request: BulkGenerateRequest,
    engine: ReconciliationEngine = Depends(_engine),
) -> BulkGenerateResponse:
    """Runs inline. Individual item failures are counted, not raised."""
    try:
        result = await engine.reconcile(request.sport_type)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return BulkGenerateResponse.model_validate(result.to_dict())


@router.post(
    "/completions/bulk-generate-async",
    response_model=BulkGenerateAsyncResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start bulk completion generation as a background job",
)
async def bulk_generate_async(
    request: BulkGenerateRequest,
    store: ContentStore = Depends(get_content_store),
) -> BulkGenerateAsyncResponse:
    try:
        sport_type = validate_sport_type(request.sport_type) if request.sport_type else None
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc

    job = await store.add_job(
        BulkCompletionJob(
            status=BulkJobStatus.pending.value,
            sport_type=sport_type,
            total_items=0,
            generated=0,
            failed=0,
            skipped=0,
            errors_json=[],
            cancel_requested=False,
            triggered_by="admin",
        )
    )
    await store.commit()

    job_uuid = str(job.job_uuid)
    try:
        job.celery_task_id = dispatch_bulk_generation(job.id)
    except TaskDispatchError as exc:
        job.status = BulkJobStatus.failed.value
        job.finished_at = now_utc()
        job.errors_json = [{"error": str(exc)}]
        await store.commit()
        logger.error("bulk_job_dispatch_failed", extra={"job_id": job_uuid})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Background worker queue unavailable; job marked failed",
        ) from exc
    await store.commit()

    logger.info("bulk_job_dispatched", extra={"job_id": job_uuid, "sport_type": sport_type})
    return BulkGenerateAsyncResponse(
        job_id=job_uuid,
        message="Bulk completion generation job started",
        status_url=f"/api/admin/editorial/completions/bulk-generate-status/{job_uuid}",
    )


async def _load_job(store: ContentStore, job_id: str) -> BulkCompletionJob:
    try:
        job_uuid = uuid.UUID(job_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid job ID format: {job_id}",
        )
    job = await store.get_job(job_uuid)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Job {job_id} not found")
    return job


def _status_response(job: BulkCompletionJob) -> BulkGenerateStatusResponse:
    return BulkGenerateStatusResponse(
        job_id=str(job.job_uuid),
        status=job.status,
        sport_type=job.sport_type,
        total=job.total_items,
        generated=job.generated,
        failed=job.failed,
        skipped=job.skipped,
        cancel_requested=job.cancel_requested,
        errors=job.errors_json or [],
        started_at=job.started_at,
        finished_at=job.finished_at,
    )


@router.get(
    "/completions/bulk-generate-status/{job_id}",
    response_model=BulkGenerateStatusResponse,
    summary="Get bulk generation job status",
)
async def get_bulk_generate_status(
    job_id: str,
    store: ContentStore = Depends(get_content_store),
) -> BulkGenerateStatusResponse:
    return _status_response(await _load_job(store, job_id))


@router.post(
    "/completions/bulk-generate/{job_id}/cancel",
    response_model=BulkGenerateStatusResponse,
    summary="Request cancellation of a bulk generation job",
)
async def cancel_bulk_generate(
    job_id: str,
    store: ContentStore = Depends(get_content_store),
) -> BulkGenerateStatusResponse:
    """Running jobs stop before their next item; pending jobs never start."""
    job = await _load_job(store, job_id)
    if job.is_finished:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Job {job_id} already {job.status}",
        )
    job.cancel_requested = True
    if job.status == BulkJobStatus.pending.value:
        job.status = BulkJobStatus.cancelled.value
        job.finished_at = now_utc()
    await store.commit()
    logger.info("bulk_job_cancel_requested", extra={"job_id": job_id, "status": job.status})
    return _status_response(job)


@router.post(
    "/completions/generate",
    response_model=CompletionResponse,
    summary="Generate or regenerate one completion",
)
async def generate_completion(
    request: GenerateCompletionRequest,
    engine: ReconciliationEngine = Depends(_engine),
) -> CompletionResponse:
    try:
        completion = await engine.generate_one(request.sport_type, request.game_id, request.slot_type)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return CompletionResponse.model_validate(completion)


@router.get(
    "/payload/{sport_type}/{game_id}",
    summary="Preview the generation payload for a game",
)
async def preview_payload(
    sport_type: str,
    game_id: str,
    slot_type: str | None = Query(None, description="Slot the payload is built for"),
    engine: ReconciliationEngine = Depends(_engine),
) -> dict[str, Any]:
    try:
        return await engine.build_game_payload(sport_type, game_id, slot_type)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
