"""Per-sport row normalizers.

Each upstream feed has its own column names and conventions. A
normalizer maps one raw feed row (plus an optional prediction row) onto
the canonical ``GameView``. Column aliases resolve with first-non-null
semantics so a stored ``0`` is data, not absence.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from ..utils.datetime_utils import parse_feed_datetime
from .types import BettingLines, GameView, Predictions, PublicBetting, TeamIdentity, Weather

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
# (sport_type, away_name, home_name) -> (away_identity, home_identity)
BrandingLookup = Callable[[str, str, str], tuple[TeamIdentity, TeamIdentity]]


def first_present(row: Row | None, *keys: str) -> Any:
    """Return the first value among ``keys`` that is not None or blank."""
    if not row:
        return None
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def to_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int(value: Any) -> int | None:
    number = to_float(value)
    if number is None:
        return None
    return int(round(number))


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    return str(value).strip().lower() in ("true", "t", "1", "yes", "y")


def negate(value: float | None) -> float | None:
    if value is None:
        return None
    return -value if value != 0 else 0.0


def derive_away_moneyline(home_ml: int | None) -> int | None:
    """Mirror a home moneyline onto the away side.

    +150 home -> -250 away, -150 home -> +250 away.
    """
    if home_ml is None:
        return None
    if home_ml > 0:
        return -(home_ml + 100)
    return 100 + abs(home_ml)


def _optional_group(cls, **fields):
    """Build a dataclass group, or None when every field is empty."""
    if all(value is None for value in fields.values()):
        return None
    return cls(**fields)


class SportNormalizer:
    """Base strategy. Subclasses map one sport's columns onto ``GameView``."""

    sport_type: str = ""
    id_keys: tuple[str, ...] = ("game_id",)
    away_keys: tuple[str, ...] = ("away_team",)
    home_keys: tuple[str, ...] = ("home_team",)

    def game_id(self, row: Row) -> str | None:
        return to_text(first_present(row, *self.id_keys))

    def normalize(
        self,
        row: Row,
        prediction: Row | None,
        branding: BrandingLookup,
    ) -> GameView | None:
        """Return the canonical view, or None when the row lacks identity."""
        game_id = self.game_id(row)
        away_name = to_text(first_present(row, *self.away_keys))
        home_name = to_text(first_present(row, *self.home_keys))
        if not game_id or not away_name or not home_name:
            logger.debug(
                "catalog_row_missing_identity",
                extra={"sport_type": self.sport_type, "game_id": game_id},
            )
            return None

        kickoff, has_time = self.kickoff(row)
        away, home = branding(self.sport_type, away_name, home_name)
        return GameView(
            sport_type=self.sport_type,
            game_id=game_id,
            away=away,
            home=home,
            kickoff=kickoff,
            has_kickoff_time=has_time,
            lines=self.lines(row, prediction),
            predictions=self.predictions(row, prediction),
            public_betting=self.public_betting(row),
            weather=self.weather(row),
            team_stats=self.team_stats(row),
            conference_game=self.conference_game(row),
            neutral_site=self.neutral_site(row),
        )

    def kickoff(self, row: Row):
        raise NotImplementedError

    def lines(self, row: Row, prediction: Row | None) -> BettingLines:
        raise NotImplementedError

    def predictions(self, row: Row, prediction: Row | None) -> Predictions | None:
        return None

    def public_betting(self, row: Row) -> PublicBetting | None:
        return None

    def weather(self, row: Row) -> Weather | None:
        return None

    def team_stats(self, row: Row) -> dict[str, float | None] | None:
        return None

    def conference_game(self, row: Row) -> bool | None:
        return None

    def neutral_site(self, row: Row) -> bool | None:
        return None


class FootballNormalizer(SportNormalizer):
    """Shared public-betting handling for the football feeds."""

    def public_betting(self, row: Row) -> PublicBetting | None:
        return _optional_group(
            PublicBetting,
            spread_split=to_text(first_present(row, "spread_splits_label")),
            ml_split=to_text(first_present(row, "ml_splits_label")),
            total_split=to_text(first_present(row, "total_splits_label")),
        )


class NflNormalizer(FootballNormalizer):
    """``nfl_betting_lines`` joined with ``nfl_predictions_epa``."""

    sport_type = "nfl"
    id_keys = ("training_key", "unique_id", "game_id")

    def kickoff(self, row: Row):
        return parse_feed_datetime(
            first_present(row, "game_date"), first_present(row, "game_time")
        )

    def lines(self, row: Row, prediction: Row | None) -> BettingLines:
        home_spread = to_float(first_present(row, "home_spread"))
        away_spread = to_float(first_present(row, "away_spread"))
        if away_spread is None:
            away_spread = negate(home_spread)
        home_ml = to_int(first_present(row, "home_ml", "home_moneyline", "homeMoneyline"))
        away_ml = to_int(first_present(row, "away_ml", "away_moneyline", "awayMoneyline"))
        return BettingLines(
            home_spread=home_spread,
            away_spread=away_spread,
            home_ml=home_ml,
            away_ml=away_ml,
            total=to_float(first_present(row, "over_line", "total_line", "over_under")),
        )

    def predictions(self, row: Row, prediction: Row | None) -> Predictions | None:
        source = prediction or row
        return _optional_group(
            Predictions,
            spread_cover_prob=to_float(first_present(source, "home_away_spread_cover_prob")),
            ou_prob=to_float(first_present(source, "ou_result_prob")),
            home_win_prob=to_float(first_present(source, "home_away_ml_prob")),
            pred_home_margin=None,
            pred_total_points=None,
        )

    def weather(self, row: Row) -> Weather | None:
        return _optional_group(
            Weather,
            temperature=to_float(first_present(row, "temperature", "weather_temp_f")),
            wind_speed=to_float(first_present(row, "wind_speed", "weather_windspeed_mph")),
            precipitation=to_float(first_present(row, "precipitation")),
            icon=to_text(first_present(row, "icon", "icon_code", "weather_icon_text")),
        )


class CfbNormalizer(FootballNormalizer):
    """``cfb_live_weekly_inputs``: lines, weather and model output in one row."""

    sport_type = "cfb"
    id_keys = ("id", "training_key", "unique_id", "game_id")

    def kickoff(self, row: Row):
        return parse_feed_datetime(
            first_present(row, "start_time", "start_date", "game_datetime", "datetime", "game_date")
        )

    def lines(self, row: Row, prediction: Row | None) -> BettingLines:
        home_spread = to_float(first_present(row, "api_spread", "home_spread"))
        if home_spread is not None:
            away_spread = negate(home_spread)
        else:
            away_spread = to_float(first_present(row, "away_spread"))
        home_ml = to_int(first_present(row, "home_moneyline", "home_ml", "homeMoneyline"))
        away_ml = to_int(first_present(row, "away_moneyline", "away_ml", "awayMoneyline"))
        return BettingLines(
            home_spread=home_spread,
            away_spread=away_spread,
            home_ml=home_ml,
            away_ml=away_ml,
            total=to_float(first_present(row, "api_over_line", "total_line", "over_line", "over_under")),
            opening_spread=to_float(first_present(row, "spread")),
        )

    def predictions(self, row: Row, prediction: Row | None) -> Predictions | None:
        source = prediction or row
        return _optional_group(
            Predictions,
            spread_cover_prob=to_float(
                first_present(source, "pred_spread_proba", "home_away_spread_cover_prob")
            ),
            ou_prob=to_float(first_present(source, "pred_total_proba", "ou_result_prob")),
            home_win_prob=to_float(first_present(source, "pred_ml_proba", "home_away_ml_prob")),
            pred_home_margin=None,
            pred_total_points=None,
        )

    def weather(self, row: Row) -> Weather | None:
        return _optional_group(
            Weather,
            temperature=to_float(first_present(row, "weather_temp_f", "temperature")),
            wind_speed=to_float(first_present(row, "weather_windspeed_mph", "wind_speed")),
            precipitation=to_float(first_present(row, "precipitation")),
            icon=to_text(first_present(row, "weather_icon_text", "icon_code", "icon")),
        )


class BasketballNormalizer(SportNormalizer):
    """Shared handling for the basketball feeds.

    Prediction-run vegas lines, when present, override the feed's lines.
    """

    stat_keys: tuple[str, ...] = ()

    def _home_spread(self, row: Row, prediction: Row | None) -> float | None:
        raise NotImplementedError

    def _home_ml(self, row: Row, prediction: Row | None) -> int | None:
        raise NotImplementedError

    def _away_ml(self, row: Row, prediction: Row | None) -> int | None:
        raise NotImplementedError

    def _total(self, row: Row, prediction: Row | None) -> float | None:
        raise NotImplementedError

    def lines(self, row: Row, prediction: Row | None) -> BettingLines:
        home_spread = self._home_spread(row, prediction)
        home_ml = self._home_ml(row, prediction)
        away_ml = self._away_ml(row, prediction)
        if away_ml is None:
            away_ml = derive_away_moneyline(home_ml)
        return BettingLines(
            home_spread=home_spread,
            away_spread=negate(home_spread),
            home_ml=home_ml,
            away_ml=away_ml,
            total=self._total(row, prediction),
        )

    def predictions(self, row: Row, prediction: Row | None) -> Predictions | None:
        if not prediction:
            return None
        return _optional_group(
            Predictions,
            spread_cover_prob=to_float(first_present(prediction, "home_cover_prob")),
            ou_prob=to_float(first_present(prediction, "over_prob")),
            home_win_prob=to_float(first_present(prediction, "home_win_prob")),
            pred_home_margin=to_float(first_present(prediction, "pred_home_margin")),
            pred_total_points=to_float(first_present(prediction, "pred_total_points")),
        )

    def team_stats(self, row: Row) -> dict[str, float | None] | None:
        stats = {key: to_float(row.get(key)) for key in self.stat_keys}
        if all(value is None for value in stats.values()):
            return None
        return stats


class NbaNormalizer(BasketballNormalizer):
    """``nba_input_values_view`` joined with the latest ``nba_predictions`` run."""

    sport_type = "nba"
    id_keys = ("game_id", "id")
    stat_keys = (
        "home_adj_pace",
        "away_adj_pace",
        "home_adj_offense",
        "away_adj_offense",
        "home_adj_defense",
        "away_adj_defense",
        "home_ats_pct",
        "away_ats_pct",
        "home_over_pct",
        "away_over_pct",
    )

    def kickoff(self, row: Row):
        return parse_feed_datetime(
            first_present(row, "game_date"), first_present(row, "tipoff_time_et")
        )

    def _home_spread(self, row: Row, prediction: Row | None) -> float | None:
        value = first_present(prediction, "vegas_home_spread")
        if value is None:
            value = first_present(row, "home_spread", "spread")
        return to_float(value)

    def _home_ml(self, row: Row, prediction: Row | None) -> int | None:
        value = first_present(prediction, "vegas_home_moneyline")
        if value is None:
            value = first_present(row, "home_moneyline", "home_ml", "homeMoneyline")
        return to_int(value)

    def _away_ml(self, row: Row, prediction: Row | None) -> int | None:
        value = first_present(prediction, "vegas_away_moneyline")
        if value is None:
            value = first_present(row, "away_moneyline", "away_ml", "awayMoneyline")
        return to_int(value)

    def _total(self, row: Row, prediction: Row | None) -> float | None:
        value = first_present(prediction, "vegas_total")
        if value is None:
            value = first_present(row, "total_line", "over_under", "over_line")
        return to_float(value)


class NcaabNormalizer(BasketballNormalizer):
    """``v_cbb_input_values`` joined with the latest ``ncaab_predictions`` run."""

    sport_type = "ncaab"
    id_keys = ("game_id", "id")
    stat_keys = (
        "home_ranking",
        "away_ranking",
        "home_adj_offense",
        "away_adj_offense",
        "home_adj_defense",
        "away_adj_defense",
        "home_adj_pace",
        "away_adj_pace",
    )

    def kickoff(self, row: Row):
        start_utc = first_present(row, "start_utc")
        if start_utc is not None:
            kickoff, has_time = parse_feed_datetime(start_utc)
            if kickoff is not None:
                return kickoff, has_time
        return parse_feed_datetime(
            first_present(row, "game_date_et", "game_date"), first_present(row, "tipoff_time_et")
        )

    def _home_spread(self, row: Row, prediction: Row | None) -> float | None:
        value = first_present(prediction, "vegas_home_spread")
        if value is None:
            value = first_present(row, "spread", "home_spread")
        return to_float(value)

    def _home_ml(self, row: Row, prediction: Row | None) -> int | None:
        value = first_present(prediction, "vegas_home_moneyline")
        if value is None:
            value = first_present(row, "homeMoneyline", "home_moneyline", "home_ml")
        return to_int(value)

    def _away_ml(self, row: Row, prediction: Row | None) -> int | None:
        value = first_present(prediction, "vegas_away_moneyline")
        if value is None:
            value = first_present(row, "awayMoneyline", "away_moneyline", "away_ml")
        return to_int(value)

    def _total(self, row: Row, prediction: Row | None) -> float | None:
        value = first_present(prediction, "vegas_total")
        if value is None:
            value = first_present(row, "over_under", "total_line")
        return to_float(value)

    def conference_game(self, row: Row) -> bool | None:
        return to_bool(row.get("conference_game"))

    def neutral_site(self, row: Row) -> bool | None:
        return to_bool(row.get("neutral_site"))


NORMALIZERS: dict[str, SportNormalizer] = {
    normalizer.sport_type: normalizer
    for normalizer in (NflNormalizer(), CfbNormalizer(), NbaNormalizer(), NcaabNormalizer())
}


def get_normalizer(sport_type: str) -> SportNormalizer:
    return NORMALIZERS[sport_type]
