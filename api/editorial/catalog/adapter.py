"""Game Catalog Adapter.

Resolves ``(sport_type, game_id)`` keys and time windows to canonical
``GameView`` objects. Sports never share lookups: ``"42"`` for nfl and
``"42"`` for cfb are unrelated games.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Iterable, Mapping

from ..config_sports import validate_sport_type
from ..utils.datetime_utils import to_eastern
from .branding import TeamBrandingResolver
from .normalizers import get_normalizer, to_float, to_text
from .source import FeedSource
from .types import GameKey, GameView, MarketOdds

logger = logging.getLogger(__name__)


def _first_per_key(rows: Iterable[Mapping[str, Any]], key_fn) -> dict[str, Mapping[str, Any]]:
    """Keep the first row seen per key. Feed queries order newest first."""
    kept: dict[str, Mapping[str, Any]] = {}
    for row in rows:
        key = key_fn(row)
        if key and key not in kept:
            kept[key] = row
    return kept


def in_window(game: GameView, start: datetime, end: datetime) -> bool:
    """Timed games compare instants; date-only games compare Eastern dates."""
    if game.kickoff is None:
        return False
    if game.has_kickoff_time:
        return start <= game.kickoff <= end
    return to_eastern(start).date() <= game.kickoff.date() <= to_eastern(end).date()


class GameCatalog:
    """Read-only view over the upstream feed, normalized per sport."""

    def __init__(
        self, source: FeedSource, branding: TeamBrandingResolver | None = None
    ) -> None:
        self._source = source
        self._branding = branding or TeamBrandingResolver()

    async def _ensure_branding(self, sport_type: str) -> None:
        if self._branding.has_sport(sport_type):
            return
        try:
            rows = await self._source.fetch_team_branding(sport_type)
        except Exception as exc:
            # Placeholders for this call only; the next fetch retries the load.
            logger.warning(
                "team_branding_load_failed",
                extra={"sport_type": sport_type, "error": str(exc)},
            )
            return
        count = self._branding.register(sport_type, rows)
        logger.debug("team_branding_loaded", extra={"sport_type": sport_type, "teams": count})

    async def _normalize(
        self, sport_type: str, rows: list[Mapping[str, Any]]
    ) -> dict[str, GameView]:
        normalizer = get_normalizer(sport_type)
        by_id = _first_per_key(rows, normalizer.game_id)
        if not by_id:
            return {}

        predictions = _first_per_key(
            await self._source.fetch_prediction_rows(sport_type, list(by_id)),
            lambda row: to_text(row.get("training_key") or row.get("game_id")),
        )
        await self._ensure_branding(sport_type)

        games: dict[str, GameView] = {}
        for game_id, row in by_id.items():
            try:
                game = normalizer.normalize(row, predictions.get(game_id), self._branding.matchup)
            except (TypeError, ValueError, KeyError) as exc:
                logger.warning(
                    "catalog_row_normalize_failed",
                    extra={"sport_type": sport_type, "game_id": game_id, "error": str(exc)},
                )
                continue
            if game is not None:
                games[game.game_id] = game
        return games

    async def fetch(self, sport_type: str, game_ids: Iterable[str]) -> dict[str, GameView]:
        """Return views for the ids the feed knows. Misses are simply absent."""
        sport_type = validate_sport_type(sport_type)
        wanted = {str(game_id) for game_id in game_ids}
        if not wanted:
            return {}
        rows = await self._source.fetch_game_rows(sport_type, game_ids=sorted(wanted))
        games = await self._normalize(sport_type, rows)
        return {game_id: game for game_id, game in games.items() if game_id in wanted}

    async def fetch_many(self, keys: Iterable[GameKey]) -> dict[GameKey, GameView]:
        """Resolve mixed-sport keys, one feed lookup per sport."""
        ids_by_sport: dict[str, set[str]] = defaultdict(set)
        for sport_type, game_id in keys:
            ids_by_sport[validate_sport_type(sport_type)].add(str(game_id))

        resolved: dict[GameKey, GameView] = {}
        for sport_type, game_ids in ids_by_sport.items():
            games = await self.fetch(sport_type, game_ids)
            for game_id, game in games.items():
                resolved[(sport_type, game_id)] = game
        return resolved

    async def list_window(
        self, sport_type: str, start: datetime, end: datetime
    ) -> list[GameView]:
        """Games whose kickoff falls in ``[start, end]``, soonest first."""
        sport_type = validate_sport_type(sport_type)
        rows = await self._source.fetch_game_rows(
            sport_type,
            start_date=to_eastern(start).date(),
            end_date=to_eastern(end).date(),
        )
        games = await self._normalize(sport_type, rows)
        window = [game for game in games.values() if in_window(game, start, end)]
        window.sort(key=lambda game: (game.kickoff, game.game_id))
        return window

    async def market_odds(
        self, sport_type: str, games: Iterable[GameView]
    ) -> dict[str, MarketOdds]:
        """Prediction-market odds by game_id; games without a market are absent."""
        sport_type = validate_sport_type(sport_type)
        games = list(games)
        if not games:
            return {}
        try:
            rows = await self._source.fetch_market_rows(sport_type)
        except Exception as exc:
            logger.warning(
                "market_odds_load_failed", extra={"sport_type": sport_type, "error": str(exc)}
            )
            return {}

        by_key: dict[str, dict[str, Mapping[str, Any]]] = defaultdict(dict)
        for row in rows:
            game_key = row.get("game_key")
            market_type = row.get("market_type")
            if game_key and market_type:
                by_key[str(game_key)][str(market_type)] = row

        odds: dict[str, MarketOdds] = {}
        for game in games:
            markets = by_key.get(game.market_key)
            if not markets:
                continue
            moneyline = markets.get("moneyline", {})
            spread = markets.get("spread", {})
            total = markets.get("total", {})
            game_odds = MarketOdds(
                moneyline_away=to_float(moneyline.get("current_away_odds")),
                moneyline_home=to_float(moneyline.get("current_home_odds")),
                spread_away=to_float(spread.get("current_away_odds")),
                spread_home=to_float(spread.get("current_home_odds")),
                # Totals reuse the away/home columns for over/under.
                total_over=to_float(total.get("current_away_odds")),
                total_under=to_float(total.get("current_home_odds")),
            )
            if not game_odds.is_empty:
                odds[game.game_id] = game_odds
        return odds
