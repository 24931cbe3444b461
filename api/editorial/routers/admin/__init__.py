"""Editorial admin router bundle. Every route requires the admin API key."""

from fastapi import APIRouter, Depends

from ...dependencies import verify_api_key
from . import completions, configs, editor_picks, value_finds

router = APIRouter(
    prefix="/api/admin/editorial",
    tags=["editorial-admin"],
    dependencies=[Depends(verify_api_key)],
)
router.include_router(completions.router)
router.include_router(value_finds.router)
router.include_router(configs.router)
router.include_router(editor_picks.router)

__all__ = ["router"]
