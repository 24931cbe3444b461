"""Reconciliation Engine.

Finds (game, slot) pairs in the upcoming window that have no completion
yet and generates them. For every enabled (sport, slot) config the work
list is the set difference between games in the window and games that
already have a completion for that slot, so re-running is a no-op for
satisfied pairs.

Items are isolated: a generation or persistence failure on one item is
recorded and the batch continues. Generation calls may run with bounded
parallelism; store access is serialized and committed per item.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable

from ..catalog.adapter import GameCatalog
from ..catalog.types import GameView, MarketOdds
from ..config import get_settings
from ..config_sports import resolve_target_sports, validate_sport_type
from ..db.content import Completion
from ..utils.datetime_utils import now_utc
from .content_store import ContentStore, group_completions_by_slot
from .errors import ConfigMismatch, GenerationError, NotFoundError
from .generation import GenerationAdapter
from .payload_builder import build_payload

logger = logging.getLogger(__name__)


class ItemStatus:
    generated = "generated"
    error = "error"
    skipped = "skipped"
    cancelled = "cancelled"


@dataclass
class ItemOutcome:
    sport_type: str
    slot_type: str
    game_id: str
    status: str
    reason: str | None = None


@dataclass
class ReconcileResult:
    generated: int = 0
    errors: int = 0
    skipped: int = 0
    cancelled: bool = False
    items: list[ItemOutcome] = field(default_factory=list)

    def record(self, outcome: ItemOutcome) -> None:
        self.items.append(outcome)
        if outcome.status == ItemStatus.generated:
            self.generated += 1
        elif outcome.status == ItemStatus.error:
            self.errors += 1
        else:
            self.skipped += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated": self.generated,
            "errors": self.errors,
            "skipped": self.skipped,
            "cancelled": self.cancelled,
            "items": [asdict(item) for item in self.items],
        }


@dataclass(frozen=True)
class WorkItem:
    sport_type: str
    slot_type: str
    game: GameView
    existing_completions: dict[str, str]
    market_odds: MarketOdds | None = None

    @property
    def game_id(self) -> str:
        return self.game.game_id


ItemCallback = Callable[[ItemOutcome, ReconcileResult], "Awaitable[None] | None"]


class ReconciliationEngine:
    def __init__(
        self,
        store: ContentStore,
        catalog: GameCatalog,
        generator: GenerationAdapter,
        *,
        window_days: int | None = None,
        concurrency: int | None = None,
        item_delay_seconds: float | None = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        settings = get_settings()
        self.store = store
        self.catalog = catalog
        self.generator = generator
        self.window_days = window_days if window_days is not None else settings.reconcile_window_days
        self.concurrency = max(1, concurrency or settings.reconcile_concurrency)
        self.item_delay_seconds = (
            item_delay_seconds
            if item_delay_seconds is not None
            else settings.reconcile_item_delay_seconds
        )
        self.clock = clock

    def window(self, now: datetime | None = None) -> tuple[datetime, datetime]:
        start = now or self.clock()
        return start, start + timedelta(days=self.window_days)

    async def plan(self, sport_type: str | None = None, now: datetime | None = None) -> list[WorkItem]:
        """Build the work list. An unknown sport fails before any lookup."""
        sports = resolve_target_sports(sport_type)
        start, end = self.window(now)
        items: list[WorkItem] = []
        for sport in sports:
            configs = [
                cfg for cfg in await self.store.list_completion_configs(sport) if cfg.enabled
            ]
            if not configs:
                logger.info("reconcile_no_enabled_slots", extra={"sport_type": sport})
                continue

            games = await self.catalog.list_window(sport, start, end)
            if not games:
                continue
            game_ids = [game.game_id for game in games]
            odds = await self.catalog.market_odds(sport, games)
            existing_rows = await self.store.completions_for_games(sport, game_ids)
            existing_text = {
                game_id: {slot: row.completion_text for slot, row in group_completions_by_slot(rows).items()}
                for game_id, rows in existing_rows.items()
            }

            for cfg in configs:
                satisfied = await self.store.existing_completion_ids(sport, cfg.slot_type, game_ids)
                missing = [game for game in games if game.game_id not in satisfied]
                logger.info(
                    "reconcile_slot_planned",
                    extra={
                        "sport_type": sport,
                        "slot_type": cfg.slot_type,
                        "games_in_window": len(games),
                        "missing": len(missing),
                    },
                )
                items.extend(
                    WorkItem(
                        sport_type=sport,
                        slot_type=cfg.slot_type,
                        game=game,
                        existing_completions=existing_text.get(game.game_id, {}),
                        market_odds=odds.get(game.game_id),
                    )
                    for game in missing
                )
        return items

    async def reconcile(
        self,
        sport_type: str | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_item: ItemCallback | None = None,
        now: datetime | None = None,
        items: list[WorkItem] | None = None,
    ) -> ReconcileResult:
        """Generate every missing completion in the window.

        Setting ``cancel_event`` stops new items from starting; in-flight
        items finish and the counters are still returned.
        """
        if items is None:
            items = await self.plan(sport_type, now)
        result = ReconcileResult()
        semaphore = asyncio.Semaphore(self.concurrency)
        store_lock = asyncio.Lock()
        cancel_event = cancel_event or asyncio.Event()

        async def finish(outcome: ItemOutcome) -> None:
            async with store_lock:
                result.record(outcome)
                if on_item is not None:
                    maybe = on_item(outcome, result)
                    if inspect.isawaitable(maybe):
                        await maybe

        async def run(item: WorkItem) -> None:
            if cancel_event.is_set():
                result.cancelled = True
                await finish(self._outcome(item, ItemStatus.cancelled, "cancelled"))
                return
            async with semaphore:
                if cancel_event.is_set():
                    result.cancelled = True
                    await finish(self._outcome(item, ItemStatus.cancelled, "cancelled"))
                    return
                outcome = await self._process(item, store_lock)
                await finish(outcome)
                if self.item_delay_seconds:
                    await asyncio.sleep(self.item_delay_seconds)

        tasks = [asyncio.ensure_future(run(item)) for item in items]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # A failing progress callback stops the batch; never leave siblings running.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info(
            "reconcile_complete",
            extra={
                "sport_type": sport_type or "all",
                "generated": result.generated,
                "errors": result.errors,
                "skipped": result.skipped,
                "cancelled": result.cancelled,
            },
        )
        return result

    @staticmethod
    def _outcome(item: WorkItem, status: str, reason: str | None = None) -> ItemOutcome:
        return ItemOutcome(item.sport_type, item.slot_type, item.game_id, status, reason)

    async def _process(self, item: WorkItem, store_lock: asyncio.Lock) -> ItemOutcome:
        """Run one item. Any failure becomes an error outcome; only cancellation propagates."""
        try:
            return await self._process_item(item, store_lock)
        except Exception as exc:
            logger.exception(
                "reconcile_item_failed",
                extra={"sport_type": item.sport_type, "slot_type": item.slot_type, "game_id": item.game_id},
            )
            async with store_lock:
                try:
                    await self.store.rollback()
                except Exception:
                    logger.exception("reconcile_item_rollback_failed", extra={"game_id": item.game_id})
            return self._outcome(item, ItemStatus.error, f"{type(exc).__name__}: {exc}")

    async def _process_item(self, item: WorkItem, store_lock: asyncio.Lock) -> ItemOutcome:
        async with store_lock:
            config = await self.store.get_slot_config(item.sport_type, item.slot_type)
        if config is None or not config.enabled:
            logger.info(
                "reconcile_item_skipped_disabled",
                extra={"sport_type": item.sport_type, "slot_type": item.slot_type, "game_id": item.game_id},
            )
            return self._outcome(item, ItemStatus.skipped, "slot disabled")

        payload = build_payload(item.game, item.slot_type, item.existing_completions, item.market_odds)
        try:
            artifact = await self.generator.generate_slot(config.system_prompt, payload)
        except GenerationError as exc:
            logger.warning(
                "reconcile_item_generation_failed",
                extra={
                    "sport_type": item.sport_type,
                    "slot_type": item.slot_type,
                    "game_id": item.game_id,
                    "kind": exc.kind,
                    "error": str(exc),
                },
            )
            return self._outcome(item, ItemStatus.error, f"{exc.kind}: {exc}")

        async with store_lock:
            try:
                await self.store.upsert_completion(
                    sport_type=item.sport_type,
                    game_id=item.game_id,
                    slot_type=item.slot_type,
                    completion_text=artifact.explanation,
                    data_payload=payload,
                    model_used=self.generator.model,
                    generated_at=now_utc(),
                )
                await self.store.commit()
            except Exception as exc:
                await self.store.rollback()
                logger.exception(
                    "reconcile_item_persist_failed",
                    extra={"sport_type": item.sport_type, "slot_type": item.slot_type, "game_id": item.game_id},
                )
                return self._outcome(item, ItemStatus.error, f"persistence: {exc}")

        return self._outcome(item, ItemStatus.generated)

    async def build_game_payload(
        self, sport_type: str, game_id: str, slot_type: str | None = None
    ) -> dict[str, Any]:
        """Payload for one game, as generation would see it."""
        sport_type = validate_sport_type(sport_type)
        games = await self.catalog.fetch(sport_type, [game_id])
        game = games.get(str(game_id))
        if game is None:
            raise NotFoundError(f"Game {sport_type}/{game_id} not found in feed")
        odds = await self.catalog.market_odds(sport_type, [game])
        existing = await self.store.completions_for_games(sport_type, [game.game_id])
        texts = {
            slot: row.completion_text
            for slot, row in group_completions_by_slot(existing.get(game.game_id, [])).items()
        }
        return build_payload(game, slot_type, texts, odds.get(game.game_id))

    async def generate_one(self, sport_type: str, game_id: str, slot_type: str) -> Completion:
        """Generate (or regenerate) a single completion.

        Raises ConfigMismatch when the slot is disabled, NotFoundError when
        the feed does not know the game, GenerationError on generation failure.
        """
        sport_type = validate_sport_type(sport_type)
        config = await self.store.get_slot_config(sport_type, slot_type)
        if config is None or not config.enabled:
            raise ConfigMismatch(f"Completion slot {sport_type}/{slot_type} is disabled")

        payload = await self.build_game_payload(sport_type, game_id, slot_type)
        artifact = await self.generator.generate_slot(config.system_prompt, payload)
        completion = await self.store.upsert_completion(
            sport_type=sport_type,
            game_id=str(game_id),
            slot_type=slot_type,
            completion_text=artifact.explanation,
            data_payload=payload,
            model_used=self.generator.model,
            generated_at=now_utc(),
        )
        await self.store.commit()
        logger.info(
            "completion_generated",
            extra={"sport_type": sport_type, "slot_type": slot_type, "game_id": str(game_id)},
        )
        return completion
