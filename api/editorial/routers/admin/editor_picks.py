"""Admin endpoints for editor picks."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ...catalog import GameCatalog
from ...config_sports import validate_sport_type
from ...dependencies import get_catalog, get_content_store
from ...services import publication
from ...services.content_store import ContentStore
from ...services.pick_stats import summarize_picks
from ..errors import HANDLED_ERRORS, to_http_exception
from ..models import (
    EditorPickCreate,
    EditorPickPublishRequest,
    EditorPickResponse,
    EditorPickResultRequest,
    PickStatsResponse,
)

router = APIRouter()


@router.post(
    "/editor-picks",
    response_model=EditorPickResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_editor_pick(
    request: EditorPickCreate,
    store: ContentStore = Depends(get_content_store),
    catalog: GameCatalog = Depends(get_catalog),
) -> EditorPickResponse:
    """Create a draft pick."""
    try:
        pick = await publication.create_editor_pick(
            store,
            catalog,
            sport_type=request.sport_type,
            game_id=request.game_id,
            selected_bet_type=request.selected_bet_type,
            editors_notes=request.editors_notes,
            editor_id=request.editor_id,
            best_price=request.best_price,
            units=request.units,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return EditorPickResponse.model_validate(pick)


@router.patch("/editor-picks/{pick_id}/publish", response_model=EditorPickResponse)
async def toggle_editor_pick_published(
    pick_id: int,
    request: EditorPickPublishRequest,
    store: ContentStore = Depends(get_content_store),
) -> EditorPickResponse:
    try:
        pick = await publication.set_editor_pick_published(store, pick_id, request.published)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return EditorPickResponse.model_validate(pick)


@router.patch("/editor-picks/{pick_id}/result", response_model=EditorPickResponse)
async def record_editor_pick_result(
    pick_id: int,
    request: EditorPickResultRequest,
    store: ContentStore = Depends(get_content_store),
) -> EditorPickResponse:
    try:
        pick = await publication.record_pick_result(
            store, pick_id, request.result, best_price=request.best_price, units=request.units
        )
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return EditorPickResponse.model_validate(pick)


@router.delete("/editor-picks/{pick_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_editor_pick(
    pick_id: int,
    store: ContentStore = Depends(get_content_store),
) -> None:
    try:
        await publication.delete_editor_pick(store, pick_id)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc


@router.get("/editor-picks/stats", response_model=PickStatsResponse)
async def editor_pick_stats(
    sport_type: str | None = Query(None),
    store: ContentStore = Depends(get_content_store),
) -> PickStatsResponse:
    """Record and units over published picks."""
    try:
        sport = validate_sport_type(sport_type) if sport_type else None
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    picks = await store.list_editor_picks(published_only=True)
    return PickStatsResponse.model_validate(summarize_picks(picks, sport).to_dict())
