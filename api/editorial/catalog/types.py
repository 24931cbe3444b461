"""Canonical game view shared by every sport feed.

Each per-sport normalizer produces a ``GameView``. Nothing downstream of
the catalog reads sport-specific column names.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from typing import Any

GameKey = tuple[str, str]  # (sport_type, game_id)

PLACEHOLDER_LOGO = "/placeholder.svg"
NEUTRAL_PRIMARY = "#6B7280"
NEUTRAL_SECONDARY = "#9CA3AF"


@dataclass(frozen=True)
class TeamIdentity:
    name: str
    logo_url: str = PLACEHOLDER_LOGO
    primary_color: str = NEUTRAL_PRIMARY
    secondary_color: str = NEUTRAL_SECONDARY
    branding_matched: bool = False


@dataclass(frozen=True)
class BettingLines:
    home_spread: float | None = None
    away_spread: float | None = None
    home_ml: int | None = None
    away_ml: int | None = None
    total: float | None = None
    opening_spread: float | None = None


@dataclass(frozen=True)
class Predictions:
    """Model outputs. Probabilities are for the home side / the over."""

    spread_cover_prob: float | None = None
    ou_prob: float | None = None
    home_win_prob: float | None = None
    pred_home_margin: float | None = None
    pred_total_points: float | None = None


@dataclass(frozen=True)
class PublicBetting:
    spread_split: str | None = None
    ml_split: str | None = None
    total_split: str | None = None


@dataclass(frozen=True)
class Weather:
    temperature: float | None = None
    wind_speed: float | None = None
    precipitation: float | None = None
    icon: str | None = None


@dataclass(frozen=True)
class MarketOdds:
    """Prediction-market prices (probability cents, 0-100)."""

    moneyline_away: float | None = None
    moneyline_home: float | None = None
    spread_away: float | None = None
    spread_home: float | None = None
    total_over: float | None = None
    total_under: float | None = None

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in asdict(self).values())


@dataclass(frozen=True)
class GameView:
    sport_type: str
    game_id: str
    away: TeamIdentity
    home: TeamIdentity
    kickoff: datetime | None  # Eastern
    has_kickoff_time: bool
    lines: BettingLines
    predictions: Predictions | None = None
    public_betting: PublicBetting | None = None
    weather: Weather | None = None
    market_odds: MarketOdds | None = None
    team_stats: dict[str, float | None] | None = None
    conference_game: bool | None = None
    neutral_site: bool | None = None

    @property
    def key(self) -> GameKey:
        return (self.sport_type, self.game_id)

    @property
    def game_date(self) -> date | None:
        return self.kickoff.date() if self.kickoff else None

    @property
    def matchup(self) -> str:
        return f"{self.away.name} @ {self.home.name}"

    @property
    def market_key(self) -> str:
        """Key used by the prediction-market cache."""
        return f"{self.sport_type}_{self.away.name}_{self.home.name}"

    def with_market_odds(self, odds: MarketOdds | None) -> "GameView":
        return replace(self, market_odds=odds)

    def to_snapshot(self) -> dict[str, Any]:
        """JSON-safe snapshot stored on picks as ``archived_game_data``."""
        return {
            "sport_type": self.sport_type,
            "game_id": self.game_id,
            "away_team": self.away.name,
            "home_team": self.home.name,
            "away_logo": self.away.logo_url,
            "home_logo": self.home.logo_url,
            "kickoff": self.kickoff.isoformat() if self.kickoff else None,
            "has_kickoff_time": self.has_kickoff_time,
            "game_date": self.game_date.isoformat() if self.game_date else None,
            "away_spread": self.lines.away_spread,
            "home_spread": self.lines.home_spread,
            "away_ml": self.lines.away_ml,
            "home_ml": self.lines.home_ml,
            "total": self.lines.total,
        }
