"""
Single Source of Truth (SSOT) for supported sports.

Reconciliation, page-level analysis, the scheduler tick and the read
surface all reference this configuration. Never hardcode sport strings
elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass

from .services.errors import InvalidSportError


@dataclass(frozen=True)
class SportConfig:
    """Configuration for a single sport feed."""

    code: str  # "nfl", "cfb", "nba", "ncaab"
    display_name: str

    # Data groups the upstream feed carries for this sport
    weather_available: bool = False
    public_betting_available: bool = False
    team_stats_available: bool = False

    # Include in bulk reconciliation when no sport is given
    reconcile_enabled: bool = True


SPORT_CONFIG: dict[str, SportConfig] = {
    "nfl": SportConfig(
        code="nfl",
        display_name="NFL Football",
        weather_available=True,
        public_betting_available=True,
    ),
    "cfb": SportConfig(
        code="cfb",
        display_name="College Football",
        weather_available=True,
        public_betting_available=True,
    ),
    "nba": SportConfig(
        code="nba",
        display_name="NBA Basketball",
        team_stats_available=True,
    ),
    "ncaab": SportConfig(
        code="ncaab",
        display_name="NCAA Basketball",
        team_stats_available=True,
    ),
}

ALL_SPORTS: tuple[str, ...] = tuple(SPORT_CONFIG)


def validate_sport_type(sport_type: str) -> str:
    """
    Validate and return a normalized sport type.

    Raises:
        InvalidSportError: If sport_type is not supported
    """
    normalized = (sport_type or "").strip().lower()
    if normalized not in SPORT_CONFIG:
        valid = ", ".join(SPORT_CONFIG.keys())
        raise InvalidSportError(f"Invalid sport_type '{sport_type}'. Must be one of: {valid}")
    return normalized


def get_sport_config(sport_type: str) -> SportConfig:
    return SPORT_CONFIG[validate_sport_type(sport_type)]


def resolve_target_sports(sport_type: str | None) -> list[str]:
    """The given sport, or every reconcile-enabled sport when omitted."""
    if sport_type is None:
        return [code for code, cfg in SPORT_CONFIG.items() if cfg.reconcile_enabled]
    return [validate_sport_type(sport_type)]
