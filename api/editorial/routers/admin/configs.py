"""Admin endpoints for the completion registry and page schedules."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...config_sports import validate_sport_type
from ...dependencies import get_content_store
from ...services import publication
from ...services.content_store import ContentStore
from ..errors import HANDLED_ERRORS, to_http_exception
from ..models import (
    CompletionConfigResponse,
    CompletionConfigUpdate,
    PageScheduleResponse,
    PageScheduleUpdate,
)

router = APIRouter()


@router.get("/completion-configs", response_model=list[CompletionConfigResponse])
async def list_completion_configs(
    sport_type: str | None = Query(None),
    store: ContentStore = Depends(get_content_store),
) -> list[CompletionConfigResponse]:
    try:
        sport = validate_sport_type(sport_type) if sport_type else None
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    configs = await store.list_completion_configs(sport)
    return [CompletionConfigResponse.model_validate(cfg) for cfg in configs]


@router.patch("/completion-configs/{config_id}", response_model=CompletionConfigResponse)
async def update_completion_config(
    config_id: int,
    request: CompletionConfigUpdate,
    store: ContentStore = Depends(get_content_store),
) -> CompletionConfigResponse:
    """Toggle a slot's kill switch or edit its prompt. Generated rows are kept."""
    try:
        config = await publication.update_completion_config(
            store,
            config_id,
            enabled=request.enabled,
            system_prompt=request.system_prompt,
            updated_by=request.updated_by,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return CompletionConfigResponse.model_validate(config)


@router.get("/schedules", response_model=list[PageScheduleResponse])
async def list_page_schedules(
    store: ContentStore = Depends(get_content_store),
) -> list[PageScheduleResponse]:
    return [PageScheduleResponse.model_validate(s) for s in await store.list_page_schedules()]


@router.patch("/schedules/{sport_type}", response_model=PageScheduleResponse)
async def update_page_schedule(
    sport_type: str,
    request: PageScheduleUpdate,
    store: ContentStore = Depends(get_content_store),
) -> PageScheduleResponse:
    try:
        schedule = await publication.update_page_schedule(
            store,
            sport_type,
            system_prompt=request.system_prompt,
            enabled=request.enabled,
            scheduled_time=request.scheduled_time,
            schedule_frequency=request.schedule_frequency,
            day_of_week=request.day_of_week,
            auto_publish=request.auto_publish,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return PageScheduleResponse.model_validate(schedule)
