"""Page-level value-find analysis for one sport.

Collects the games in the upcoming window together with their existing
completions and market odds, asks the generation service for a value-find
bundle, and stores it. A generation failure propagates to the caller and
nothing is stored.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..catalog.adapter import GameCatalog
from ..config import get_settings
from ..config_sports import validate_sport_type
from ..db.content import ValueFindBundle
from ..utils.datetime_utils import now_utc, today_eastern
from .content_store import ContentStore, group_completions_by_slot
from .errors import NotFoundError
from .generation import GenerationAdapter
from .payload_builder import build_page_payload
from .publication import transition

logger = logging.getLogger(__name__)


async def generate_page_level_analysis(
    store: ContentStore,
    catalog: GameCatalog,
    generator: GenerationAdapter,
    sport_type: str,
    *,
    generated_by: str | None = None,
    now: datetime | None = None,
) -> ValueFindBundle:
    sport_type = validate_sport_type(sport_type)
    now = now or now_utc()

    schedule = await store.get_page_schedule(sport_type)
    if schedule is None:
        raise NotFoundError(f"No page schedule for {sport_type}")

    end = now + timedelta(days=get_settings().reconcile_window_days)
    games = await catalog.list_window(sport_type, now, end)
    game_ids = [game.game_id for game in games]
    odds = await catalog.market_odds(sport_type, games)
    existing = await store.completions_for_games(sport_type, game_ids)
    completions_by_game = {
        game_id: {slot: row.completion_text for slot, row in group_completions_by_slot(rows).items()}
        for game_id, rows in existing.items()
    }

    analysis_date = today_eastern(now)
    payload = build_page_payload(sport_type, games, completions_by_game, odds, analysis_date)
    logger.info(
        "page_analysis_starting",
        extra={"sport_type": sport_type, "games": len(games), "model": generator.model},
    )

    artifact = await generator.generate_value_finds(schedule.system_prompt, payload)

    page_header = artifact.page_header.model_dump() if artifact.page_header else None
    bundle = ValueFindBundle(
        sport_type=sport_type,
        analysis_date=analysis_date,
        high_value_badges=[badge.model_dump() for badge in artifact.high_value_badges],
        editor_cards=[card.model_dump() for card in artifact.editor_cards],
        value_picks=list(artifact.value_picks),
        page_header_data=page_header,
        summary_text=artifact.effective_summary,
        analysis_json=artifact.model_dump(),
        published=bool(schedule.auto_publish),
        generated_by=generated_by,
        created_at=now,
    )
    async with transition(store, "value_find_create", sport_type=sport_type):
        bundle = await store.add_value_find(bundle)
        schedule.last_run_at = now

    logger.info(
        "page_analysis_complete",
        extra={
            "sport_type": sport_type,
            "bundle_id": bundle.id,
            "badges": len(bundle.high_value_badges),
            "editor_cards": len(bundle.editor_cards),
            "published": bundle.published,
        },
    )
    return bundle
