"""Publication State Machine.

Admin-only transitions over generated content and editor picks:

- completion slots: ``enabled`` kill switch on the config row; rows are kept
- value-find bundles: unpublished <-> published, any -> deleted
- editor picks: draft <-> published, any -> deleted (votes removed first)

Every transition is all-or-nothing. A store failure rolls back and raises
``PersistenceError``; a missing (or already deleted) row raises
``NotFoundError``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import time
from typing import Any, AsyncIterator

from ..catalog.adapter import GameCatalog
from ..config_sports import validate_sport_type
from ..db.content import CompletionConfig, PageSchedule, ScheduleFrequency, ValueFindBundle
from ..db.picks import BetType, EditorPick, PickResult
from ..utils.datetime_utils import now_utc
from .content_store import ContentStore
from .errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transition(store: ContentStore, action: str, **context: Any) -> AsyncIterator[None]:
    """Run the body and commit, or roll back everything."""
    try:
        yield
        await store.commit()
    except (NotFoundError, ValueError):
        await store.rollback()
        raise
    except Exception as exc:
        await store.rollback()
        logger.error(
            "publication_transition_failed",
            extra={"action": action, "error": str(exc), **context},
        )
        raise PersistenceError(f"{action} failed: {exc}") from exc
    logger.info("publication_transition", extra={"action": action, **context})


# ---------------------------------------------------------------------------
# Value finds
# ---------------------------------------------------------------------------


async def set_value_find_published(
    store: ContentStore, bundle_id: int, published: bool
) -> ValueFindBundle:
    async with transition(store, "value_find_publish", bundle_id=bundle_id, published=published):
        bundle = await store.get_value_find(bundle_id)
        if bundle is None:
            raise NotFoundError(f"Value find {bundle_id} not found")
        bundle.published = published
    return bundle


async def delete_value_find(store: ContentStore, bundle_id: int) -> None:
    async with transition(store, "value_find_delete", bundle_id=bundle_id):
        bundle = await store.get_value_find(bundle_id)
        if bundle is None:
            raise NotFoundError(f"Value find {bundle_id} not found")
        await store.delete_value_find(bundle)


# ---------------------------------------------------------------------------
# Completion registry and schedules
# ---------------------------------------------------------------------------


async def update_completion_config(
    store: ContentStore,
    config_id: int,
    *,
    enabled: bool | None = None,
    system_prompt: str | None = None,
    updated_by: str | None = None,
) -> CompletionConfig:
    """Toggle a slot's kill switch and/or replace its prompt."""
    async with transition(store, "completion_config_update", config_id=config_id, enabled=enabled):
        config = await store.get_completion_config(config_id)
        if config is None:
            raise NotFoundError(f"Completion config {config_id} not found")
        if enabled is not None:
            config.enabled = enabled
        if system_prompt is not None:
            config.system_prompt = system_prompt
        if updated_by is not None:
            config.updated_by = updated_by
        config.updated_at = now_utc()
    return config


async def update_page_schedule(
    store: ContentStore,
    sport_type: str,
    *,
    system_prompt: str | None = None,
    enabled: bool | None = None,
    scheduled_time: time | None = None,
    schedule_frequency: str | None = None,
    day_of_week: int | None = None,
    auto_publish: bool | None = None,
) -> PageSchedule:
    sport_type = validate_sport_type(sport_type)
    if schedule_frequency is not None and schedule_frequency not in ScheduleFrequency.__members__:
        raise ValueError(f"schedule_frequency must be one of: {', '.join(ScheduleFrequency.__members__)}")
    if day_of_week is not None and not 0 <= day_of_week <= 6:
        raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")

    async with transition(store, "page_schedule_update", sport_type=sport_type):
        schedule = await store.get_page_schedule(sport_type)
        if schedule is None:
            raise NotFoundError(f"No page schedule for {sport_type}")
        if system_prompt is not None:
            schedule.system_prompt = system_prompt
        if enabled is not None:
            schedule.enabled = enabled
        if scheduled_time is not None:
            schedule.scheduled_time = scheduled_time
        if schedule_frequency is not None:
            schedule.schedule_frequency = schedule_frequency
        if day_of_week is not None:
            schedule.day_of_week = day_of_week
        if auto_publish is not None:
            schedule.auto_publish = auto_publish
        schedule.updated_at = now_utc()
    return schedule


# ---------------------------------------------------------------------------
# Editor picks
# ---------------------------------------------------------------------------


async def create_editor_pick(
    store: ContentStore,
    catalog: GameCatalog | None,
    *,
    sport_type: str,
    game_id: str,
    selected_bet_type: str,
    editors_notes: str | None = None,
    editor_id: str | None = None,
    best_price: str | None = None,
    units: float | None = None,
) -> EditorPick:
    """Create a draft pick, snapshotting the game while the feed still has it."""
    sport_type = validate_sport_type(sport_type)
    if selected_bet_type not in BetType.__members__:
        raise ValueError(f"selected_bet_type must be one of: {', '.join(BetType.__members__)}")

    snapshot = None
    if catalog is not None:
        try:
            game = (await catalog.fetch(sport_type, [game_id])).get(str(game_id))
        except Exception as exc:
            # The pick is still created; readers see it without a snapshot.
            logger.warning(
                "editor_pick_snapshot_failed",
                extra={"sport_type": sport_type, "game_id": str(game_id), "error": str(exc)},
            )
            game = None
        snapshot = game.to_snapshot() if game else None

    now = now_utc()
    pick = EditorPick(
        game_id=str(game_id),
        sport_type=sport_type,
        editor_id=editor_id,
        selected_bet_type=selected_bet_type,
        editors_notes=editors_notes,
        is_published=False,
        result=PickResult.pending.value,
        best_price=best_price,
        units=units,
        archived_game_data=snapshot,
        created_at=now,
        updated_at=now,
    )
    async with transition(store, "editor_pick_create", sport_type=sport_type, game_id=str(game_id)):
        pick = await store.add_editor_pick(pick)
    return pick


async def set_editor_pick_published(store: ContentStore, pick_id: int, published: bool) -> EditorPick:
    async with transition(store, "editor_pick_publish", pick_id=pick_id, published=published):
        pick = await store.get_editor_pick(pick_id)
        if pick is None:
            raise NotFoundError(f"Editor pick {pick_id} not found")
        pick.is_published = published
        pick.updated_at = now_utc()
    return pick


async def record_pick_result(
    store: ContentStore,
    pick_id: int,
    result: str,
    *,
    best_price: str | None = None,
    units: float | None = None,
) -> EditorPick:
    if result not in PickResult.__members__:
        raise ValueError(f"result must be one of: {', '.join(PickResult.__members__)}")
    async with transition(store, "editor_pick_result", pick_id=pick_id, result=result):
        pick = await store.get_editor_pick(pick_id)
        if pick is None:
            raise NotFoundError(f"Editor pick {pick_id} not found")
        pick.result = result
        if best_price is not None:
            pick.best_price = best_price
        if units is not None:
            pick.units = units
        pick.updated_at = now_utc()
    return pick


async def delete_editor_pick(store: ContentStore, pick_id: int) -> None:
    async with transition(store, "editor_pick_delete", pick_id=pick_id):
        pick = await store.get_editor_pick(pick_id)
        if pick is None:
            raise NotFoundError(f"Editor pick {pick_id} not found")
        await store.delete_editor_pick(pick)
