"""End-user reads over published content.

Kill switches are read on every call: a disabled slot serves the static
fallback text even when a generated row exists, and the row is served
again as soon as the slot is re-enabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..catalog.adapter import GameCatalog
from ..config import get_settings
from ..config_sports import validate_sport_type
from ..db.content import ValueFindBundle
from ..utils.datetime_utils import now_utc
from .content_store import ContentStore, group_completions_by_slot
from .picks_classifier import PickBuckets, classify_picks

logger = logging.getLogger(__name__)

SLOT_AVAILABLE = "available"
SLOT_DISABLED = "disabled"
SLOT_PENDING = "pending"


@dataclass(frozen=True)
class SlotText:
    slot_type: str
    text: str
    status: str
    generated_at: datetime | None = None

    @property
    def is_fallback(self) -> bool:
        return self.status != SLOT_AVAILABLE


async def get_game_completions(
    store: ContentStore, sport_type: str, game_id: str
) -> list[SlotText]:
    """One entry per configured slot, falling back when disabled or not generated."""
    sport_type = validate_sport_type(sport_type)
    fallback = get_settings().completion_fallback_text
    configs = await store.list_completion_configs(sport_type)
    rows = group_completions_by_slot(
        (await store.completions_for_games(sport_type, [str(game_id)])).get(str(game_id), [])
    )

    slots: list[SlotText] = []
    for config in configs:
        row = rows.get(config.slot_type)
        if not config.enabled:
            slots.append(SlotText(config.slot_type, fallback, SLOT_DISABLED))
        elif row is None:
            slots.append(SlotText(config.slot_type, fallback, SLOT_PENDING))
        else:
            slots.append(
                SlotText(config.slot_type, row.completion_text, SLOT_AVAILABLE, row.generated_at)
            )
    return slots


async def get_published_value_find(store: ContentStore, sport_type: str) -> ValueFindBundle | None:
    """Newest published bundle for the sport."""
    return await store.latest_value_find(validate_sport_type(sport_type), published_only=True)


async def get_editor_picks(
    store: ContentStore,
    catalog: GameCatalog,
    *,
    is_admin: bool,
    now: datetime | None = None,
) -> PickBuckets:
    picks = await store.list_editor_picks(published_only=not is_admin)
    keys = {(pick.sport_type, str(pick.game_id)) for pick in picks}
    games: dict[Any, Any] = {}
    if keys:
        try:
            games = await catalog.fetch_many(keys)
        except Exception as exc:
            # Every pick still renders through its snapshot or not-found entry.
            logger.warning("editor_picks_catalog_failed", extra={"error": str(exc)})
    return classify_picks(picks, games, now or now_utc(), is_admin)
