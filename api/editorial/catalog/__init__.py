"""Game catalog: per-sport feeds normalized into ``GameView``."""

from .adapter import GameCatalog
from .branding import TeamBrandingResolver
from .source import FeedSource, SqlFeedSource
from .types import (
    BettingLines,
    GameKey,
    GameView,
    MarketOdds,
    Predictions,
    PublicBetting,
    TeamIdentity,
    Weather,
)

__all__ = [
    "BettingLines",
    "FeedSource",
    "GameCatalog",
    "GameKey",
    "GameView",
    "MarketOdds",
    "Predictions",
    "PublicBetting",
    "SqlFeedSource",
    "TeamBrandingResolver",
    "TeamIdentity",
    "Weather",
]
