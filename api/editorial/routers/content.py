"""End-user read surface for generated content and editor picks.

Responses declare a bounded staleness window through ``Cache-Control``;
publication changes reach readers within that window.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..catalog import GameCatalog
from ..config import settings
from ..dependencies import get_catalog, get_content_store, is_admin_request
from ..services import read_surface
from ..services.content_store import ContentStore
from ..services.errors import InvalidSportError
from .errors import to_http_exception
from .models import (
    EditorPicksResponse,
    GameCompletionsResponse,
    SlotTextResponse,
    ValueFindResponse,
)

router = APIRouter(prefix="/api/content", tags=["editorial-content"])


def _cache_headers(response: Response, is_admin: bool = False) -> None:
    scope = "private" if is_admin else "public"
    response.headers["Cache-Control"] = f"{scope}, max-age={settings.publication_staleness_seconds}"


@router.get("/games/{sport_type}/{game_id}/completions", response_model=GameCompletionsResponse)
async def get_game_completions(
    sport_type: str,
    game_id: str,
    response: Response,
    store: ContentStore = Depends(get_content_store),
) -> GameCompletionsResponse:
    try:
        slots = await read_surface.get_game_completions(store, sport_type, game_id)
    except InvalidSportError as exc:
        raise to_http_exception(exc) from exc
    _cache_headers(response)
    return GameCompletionsResponse(
        sport_type=sport_type.lower(),
        game_id=game_id,
        completions=[
            SlotTextResponse(
                slot_type=slot.slot_type,
                text=slot.text,
                status=slot.status,
                is_fallback=slot.is_fallback,
                generated_at=slot.generated_at,
            )
            for slot in slots
        ],
    )


@router.get("/value-finds/{sport_type}", response_model=ValueFindResponse)
async def get_value_finds(
    sport_type: str,
    response: Response,
    store: ContentStore = Depends(get_content_store),
) -> ValueFindResponse:
    try:
        bundle = await read_surface.get_published_value_find(store, sport_type)
    except InvalidSportError as exc:
        raise to_http_exception(exc) from exc
    if bundle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No published value finds for {sport_type}",
        )
    _cache_headers(response)
    return ValueFindResponse.model_validate(bundle)


@router.get("/editor-picks", response_model=EditorPicksResponse)
async def get_editor_picks(
    response: Response,
    is_admin: bool = Depends(is_admin_request),
    store: ContentStore = Depends(get_content_store),
    catalog: GameCatalog = Depends(get_catalog),
) -> EditorPicksResponse:
    """Readers get published picks within the grace window; admins get every bucket."""
    buckets = await read_surface.get_editor_picks(store, catalog, is_admin=is_admin)
    _cache_headers(response, is_admin)
    return EditorPicksResponse.from_buckets(buckets)
