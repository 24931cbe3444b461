"""Team branding: logos, colors and matchup color resolution.

NFL and NBA branding ships as static maps. College branding is loaded
from the feed's team mapping tables and registered per sport at runtime.
Lookups never fail; a miss yields the placeholder logo and neutral colors.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from .types import NEUTRAL_PRIMARY, NEUTRAL_SECONDARY, PLACEHOLDER_LOGO, TeamIdentity

logger = logging.getLogger(__name__)

CLASH_THRESHOLD = 0.12

_NFL_LOGO = "https://a.espncdn.com/i/teamlogos/nfl/500/{}.png"
_NBA_LOGO = "https://a.espncdn.com/i/teamlogos/nba/500/{}.png"


@dataclass(frozen=True)
class TeamBranding:
    logo_url: str
    primary_color: str = NEUTRAL_PRIMARY
    secondary_color: str = NEUTRAL_SECONDARY


def _static(template: str, entries: dict[str, tuple[str, str, str]]) -> dict[str, TeamBranding]:
    return {
        name: TeamBranding(template.format(abbr), primary, secondary)
        for name, (abbr, primary, secondary) in entries.items()
    }


# NFL feed rows carry city-style names ("Kansas City", "NY Giants").
NFL_BRANDING = _static(
    _NFL_LOGO,
    {
        "Arizona": ("ari", "#97233F", "#000000"),
        "Atlanta": ("atl", "#A71930", "#000000"),
        "Baltimore": ("bal", "#241773", "#9E7C0C"),
        "Buffalo": ("buf", "#00338D", "#C60C30"),
        "Carolina": ("car", "#0085CA", "#101820"),
        "Chicago": ("chi", "#0B162A", "#C83803"),
        "Cincinnati": ("cin", "#FB4F14", "#000000"),
        "Cleveland": ("cle", "#311D00", "#FF3C00"),
        "Dallas": ("dal", "#003594", "#869397"),
        "Denver": ("den", "#FB4F14", "#002244"),
        "Detroit": ("det", "#0076B6", "#B0B7BC"),
        "Green Bay": ("gb", "#203731", "#FFB612"),
        "Houston": ("hou", "#03202F", "#A71930"),
        "Indianapolis": ("ind", "#002C5F", "#A2AAAD"),
        "Jacksonville": ("jax", "#006778", "#D7A22A"),
        "Kansas City": ("kc", "#E31837", "#FFB81C"),
        "Las Vegas": ("lv", "#000000", "#A5ACAF"),
        "LA Chargers": ("lac", "#0080C6", "#FFC20E"),
        "Los Angeles Chargers": ("lac", "#0080C6", "#FFC20E"),
        "LA Rams": ("lar", "#003594", "#FFA300"),
        "Los Angeles Rams": ("lar", "#003594", "#FFA300"),
        "Miami": ("mia", "#008E97", "#FC4C02"),
        "Minnesota": ("min", "#4F2683", "#FFC62F"),
        "New England": ("ne", "#002244", "#C60C30"),
        "New Orleans": ("no", "#D3BC8D", "#101820"),
        "NY Giants": ("nyg", "#0B2265", "#A71930"),
        "New York Giants": ("nyg", "#0B2265", "#A71930"),
        "NY Jets": ("nyj", "#125740", "#000000"),
        "New York Jets": ("nyj", "#125740", "#000000"),
        "Philadelphia": ("phi", "#004C54", "#A5ACAF"),
        "Pittsburgh": ("pit", "#FFB612", "#101820"),
        "San Francisco": ("sf", "#AA0000", "#B3995D"),
        "Seattle": ("sea", "#002244", "#69BE28"),
        "Tampa Bay": ("tb", "#D50A0A", "#34302B"),
        "Tennessee": ("ten", "#0C2340", "#4B92DB"),
        "Washington": ("wsh", "#5A1414", "#FFB612"),
    },
)

NBA_BRANDING = _static(
    _NBA_LOGO,
    {
        "Atlanta Hawks": ("atl", "#E03A3E", "#C1D32F"),
        "Boston Celtics": ("bos", "#007A33", "#BA9653"),
        "Brooklyn Nets": ("bkn", "#000000", "#FFFFFF"),
        "Charlotte Hornets": ("cha", "#1D1160", "#00788C"),
        "Chicago Bulls": ("chi", "#CE1141", "#000000"),
        "Cleveland Cavaliers": ("cle", "#860038", "#FDBB30"),
        "Dallas Mavericks": ("dal", "#00538C", "#002B5E"),
        "Denver Nuggets": ("den", "#0E2240", "#FEC524"),
        "Detroit Pistons": ("det", "#C8102E", "#1D42BA"),
        "Golden State Warriors": ("gs", "#1D428A", "#FFC72C"),
        "Houston Rockets": ("hou", "#CE1141", "#000000"),
        "Indiana Pacers": ("ind", "#002D62", "#FDBB30"),
        "LA Clippers": ("lac", "#C8102E", "#1D428A"),
        "Los Angeles Clippers": ("lac", "#C8102E", "#1D428A"),
        "Los Angeles Lakers": ("lal", "#552583", "#FDB927"),
        "Memphis Grizzlies": ("mem", "#5D76A9", "#12173F"),
        "Miami Heat": ("mia", "#98002E", "#F9A01B"),
        "Milwaukee Bucks": ("mil", "#00471B", "#EEE1C6"),
        "Minnesota Timberwolves": ("min", "#0C2340", "#236192"),
        "New Orleans Pelicans": ("no", "#0C2340", "#C8102E"),
        "New York Knicks": ("ny", "#006BB6", "#F58426"),
        "Oklahoma City Thunder": ("okc", "#007AC1", "#EF3B24"),
        "Orlando Magic": ("orl", "#0077C0", "#C4CED4"),
        "Philadelphia 76ers": ("phi", "#006BB6", "#ED174C"),
        "Phoenix Suns": ("phx", "#1D1160", "#E56020"),
        "Portland Trail Blazers": ("por", "#E03A3E", "#000000"),
        "Sacramento Kings": ("sac", "#5A2D81", "#63727A"),
        "San Antonio Spurs": ("sa", "#C4CED4", "#000000"),
        "Toronto Raptors": ("tor", "#CE1141", "#000000"),
        "Utah Jazz": ("utah", "#002B5C", "#F9A01B"),
        "Washington Wizards": ("wsh", "#002B5C", "#E31837"),
    },
)


def hex_to_rgb(hex_color: str) -> tuple[float, float, float]:
    """Convert '#RRGGBB' to a normalized (0.0-1.0) RGB tuple."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16) / 255.0, int(h[2:4], 16) / 255.0, int(h[4:6], 16) / 255.0


def color_distance(c1: str, c2: str) -> float:
    """Euclidean RGB distance normalized to 0.0-1.0."""
    r1, g1, b1 = hex_to_rgb(c1)
    r2, g2, b2 = hex_to_rgb(c2)
    return math.sqrt((r1 - r2) ** 2 + (g1 - g2) ** 2 + (b1 - b2) ** 2) / math.sqrt(3)


def colors_clash(c1: str, c2: str) -> bool:
    try:
        return color_distance(c1, c2) < CLASH_THRESHOLD
    except ValueError:
        return False


def resolve_matchup_colors(
    away: TeamIdentity, home: TeamIdentity
) -> tuple[TeamIdentity, TeamIdentity]:
    """Home team yields to neutral colors when the primaries are too similar."""
    if colors_clash(home.primary_color, away.primary_color):
        home = replace(home, primary_color=NEUTRAL_PRIMARY, secondary_color=NEUTRAL_SECONDARY)
    return away, home


def match_team(name: str, mapping: Mapping[str, TeamBranding]) -> TeamBranding | None:
    """Exact, then case-insensitive, then substring match in either direction."""
    if not name:
        return None
    if name in mapping:
        return mapping[name]

    folded = name.casefold()
    for key, branding in mapping.items():
        if key.casefold() == folded:
            return branding

    for key, branding in mapping.items():
        key_folded = key.casefold()
        if key_folded in folded or folded in key_folded:
            return branding
    return None


class TeamBrandingResolver:
    """Resolves team names to ``TeamIdentity`` per sport."""

    def __init__(self) -> None:
        self._maps: dict[str, dict[str, TeamBranding]] = {
            "nfl": dict(NFL_BRANDING),
            "nba": dict(NBA_BRANDING),
        }

    def has_sport(self, sport_type: str) -> bool:
        return sport_type in self._maps

    def register(self, sport_type: str, rows: Iterable[Mapping[str, object]]) -> int:
        """Load feed mapping rows (``name``, ``logo_url``, colors) for a sport."""
        mapping: dict[str, TeamBranding] = {}
        for row in rows:
            name = row.get("name")
            if not name:
                continue
            mapping[str(name)] = TeamBranding(
                logo_url=str(row.get("logo_url") or PLACEHOLDER_LOGO),
                primary_color=str(row.get("primary_color") or NEUTRAL_PRIMARY),
                secondary_color=str(row.get("secondary_color") or NEUTRAL_SECONDARY),
            )
        self._maps[sport_type] = mapping
        return len(mapping)

    def identity(self, sport_type: str, name: str) -> TeamIdentity:
        branding = match_team(name, self._maps.get(sport_type, {}))
        if branding is None:
            logger.debug(
                "team_branding_miss", extra={"sport_type": sport_type, "team": name}
            )
            return TeamIdentity(name=name)
        return TeamIdentity(
            name=name,
            logo_url=branding.logo_url,
            primary_color=branding.primary_color,
            secondary_color=branding.secondary_color,
            branding_matched=True,
        )

    def matchup(
        self, sport_type: str, away_name: str, home_name: str
    ) -> tuple[TeamIdentity, TeamIdentity]:
        return resolve_matchup_colors(
            self.identity(sport_type, away_name), self.identity(sport_type, home_name)
        )
