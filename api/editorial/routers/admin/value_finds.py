"""Admin endpoints for page-level value finds."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...catalog import GameCatalog
from ...config_sports import validate_sport_type
from ...dependencies import get_catalog, get_content_store, get_generation_adapter
from ...services import publication
from ...services.content_store import ContentStore
from ...services.generation import GenerationAdapter
from ...services.page_analysis import generate_page_level_analysis
from ..errors import HANDLED_ERRORS, to_http_exception
from ..models import ValueFindPublishRequest, ValueFindResponse

router = APIRouter()


@router.post(
    "/value-finds/{sport_type}/generate",
    response_model=ValueFindResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a page-level value-find bundle now",
)
async def generate_value_finds(
    sport_type: str,
    store: ContentStore = Depends(get_content_store),
    catalog: GameCatalog = Depends(get_catalog),
    generator: GenerationAdapter = Depends(get_generation_adapter),
) -> ValueFindResponse:
    try:
        bundle = await generate_page_level_analysis(
            store, catalog, generator, sport_type, generated_by="admin"
        )
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return ValueFindResponse.model_validate(bundle)


@router.get(
    "/value-finds/{sport_type}/preview",
    response_model=ValueFindResponse,
    summary="Newest bundle for a sport, published or not",
)
async def preview_value_finds(
    sport_type: str,
    store: ContentStore = Depends(get_content_store),
) -> ValueFindResponse:
    try:
        sport_type = validate_sport_type(sport_type)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    bundle = await store.latest_value_find(sport_type)
    if bundle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No value finds generated for {sport_type}",
        )
    return ValueFindResponse.model_validate(bundle)


@router.patch(
    "/value-finds/{bundle_id}",
    response_model=ValueFindResponse,
    summary="Publish or unpublish a value-find bundle",
)
async def toggle_value_find_published(
    bundle_id: int,
    request: ValueFindPublishRequest,
    store: ContentStore = Depends(get_content_store),
) -> ValueFindResponse:
    try:
        bundle = await publication.set_value_find_published(store, bundle_id, request.published)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return ValueFindResponse.model_validate(bundle)


@router.delete(
    "/value-finds/{bundle_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a value-find bundle",
)
async def delete_value_find(
    bundle_id: int,
    store: ContentStore = Depends(get_content_store),
) -> None:
    try:
        await publication.delete_value_find(store, bundle_id)
    except HANDLED_ERRORS as exc:
        raise to_http_exception(exc) from exc
