"""Payload Builder.

Pure transform from a ``GameView`` to the JSON payload handed to the
generation service. The shape is fixed: every top-level key is always
present and unavailable data is an explicit ``None``.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Iterable, Mapping

from ..catalog.types import GameView, MarketOdds, Predictions
from ..db.content import SlotType

PAYLOAD_KEYS = (
    "game",
    "vegas_lines",
    "weather",
    "public_betting",
    "polymarket",
    "predictions",
    "team_stats",
    "existing_completions",
)

LOW_CONFIDENCE_MAX = 0.58
MODERATE_CONFIDENCE_MAX = 0.65


def confidence_level(probability: float | None) -> str | None:
    """Bucket the favored side's probability: low, moderate or high."""
    if probability is None:
        return None
    # 1 - p is inexact; compare at bucket precision.
    favored = round(max(probability, 1 - probability), 6)
    if favored <= LOW_CONFIDENCE_MAX:
        return "low"
    if favored <= MODERATE_CONFIDENCE_MAX:
        return "moderate"
    return "high"


def _pick_side(probability: float | None, yes: str, no: str) -> tuple[str | None, float | None]:
    if probability is None:
        return None, None
    if probability >= 0.5:
        return yes, probability
    return no, 1 - probability


def _spread_block(game: GameView, preds: Predictions) -> dict[str, Any] | None:
    side, prob = _pick_side(preds.spread_cover_prob, game.home.name, game.away.name)
    if side is None and preds.pred_home_margin is not None and game.lines.home_spread is not None:
        # Margin models: home covers when predicted margin beats the spread.
        covers = preds.pred_home_margin + game.lines.home_spread > 0
        side = game.home.name if covers else game.away.name
    if side is None:
        return None
    line = game.lines.home_spread if side == game.home.name else game.lines.away_spread
    return {
        "predicted_side": side,
        "probability": prob,
        "line": line,
        "confidence_level": confidence_level(prob),
    }


def _total_block(game: GameView, preds: Predictions) -> dict[str, Any] | None:
    side, prob = _pick_side(preds.ou_prob, "over", "under")
    if side is None and preds.pred_total_points is not None and game.lines.total is not None:
        side = "over" if preds.pred_total_points > game.lines.total else "under"
    if side is None:
        return None
    return {
        "predicted_side": side,
        "probability": prob,
        "line": game.lines.total,
        "predicted_total": preds.pred_total_points,
        "confidence_level": confidence_level(prob),
    }


def _moneyline_block(game: GameView, preds: Predictions) -> dict[str, Any] | None:
    side, prob = _pick_side(preds.home_win_prob, game.home.name, game.away.name)
    if side is None:
        return None
    odds = game.lines.home_ml if side == game.home.name else game.lines.away_ml
    return {
        "predicted_side": side,
        "probability": prob,
        "odds": odds,
        "confidence_level": confidence_level(prob),
    }


def _predictions(game: GameView) -> dict[str, Any] | None:
    preds = game.predictions
    if preds is None:
        return None
    return {
        **asdict(preds),
        SlotType.spread_prediction.value: _spread_block(game, preds),
        SlotType.ou_prediction.value: _total_block(game, preds),
        SlotType.moneyline_prediction.value: _moneyline_block(game, preds),
    }


def _polymarket(odds: MarketOdds | None) -> dict[str, Any] | None:
    if odds is None or odds.is_empty:
        return None

    def pair(first_key: str, first: float | None, second_key: str, second: float | None):
        if first is None and second is None:
            return None
        return {first_key: first, second_key: second}

    return {
        "moneyline": pair("away_odds", odds.moneyline_away, "home_odds", odds.moneyline_home),
        "spread": pair("away_odds", odds.spread_away, "home_odds", odds.spread_home),
        "total": pair("over_odds", odds.total_over, "under_odds", odds.total_under),
    }


def _game_block(game: GameView) -> dict[str, Any]:
    return {
        "sport_type": game.sport_type,
        "game_id": game.game_id,
        "away_team": game.away.name,
        "home_team": game.home.name,
        "away_logo": game.away.logo_url,
        "home_logo": game.home.logo_url,
        "kickoff": game.kickoff.isoformat() if game.kickoff else None,
        "game_date": game.game_date.isoformat() if game.game_date else None,
        "has_kickoff_time": game.has_kickoff_time,
        "conference_game": game.conference_game,
        "neutral_site": game.neutral_site,
    }


def build_payload(
    game: GameView,
    slot_type: str | None = None,
    existing_completions: Mapping[str, str] | None = None,
    market_odds: MarketOdds | None = None,
) -> dict[str, Any]:
    """Build the per-game generation payload.

    ``existing_completions`` maps slot type to text; the slot being
    generated is left out so the model never sees its own previous output.
    """
    existing = {
        slot: text
        for slot, text in (existing_completions or {}).items()
        if slot != slot_type and text
    }
    return {
        "game": _game_block(game),
        "vegas_lines": asdict(game.lines),
        "weather": asdict(game.weather) if game.weather else None,
        "public_betting": asdict(game.public_betting) if game.public_betting else None,
        "polymarket": _polymarket(market_odds if market_odds is not None else game.market_odds),
        "predictions": _predictions(game),
        "team_stats": dict(game.team_stats) if game.team_stats else None,
        "existing_completions": existing,
    }


def build_page_payload(
    sport_type: str,
    games: Iterable[GameView],
    completions_by_game: Mapping[str, Mapping[str, str]] | None = None,
    market_odds_by_game: Mapping[str, MarketOdds] | None = None,
    analysis_date: date | None = None,
) -> dict[str, Any]:
    """Aggregate per-game payloads for page-level value-find analysis."""
    completions_by_game = completions_by_game or {}
    market_odds_by_game = market_odds_by_game or {}
    payloads = [
        build_payload(
            game,
            None,
            completions_by_game.get(game.game_id),
            market_odds_by_game.get(game.game_id),
        )
        for game in games
    ]
    return {
        "sport_type": sport_type,
        "analysis_date": analysis_date.isoformat() if analysis_date else None,
        "game_count": len(payloads),
        "games": payloads,
    }
