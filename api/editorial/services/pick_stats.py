"""Editor pick grading: units won/lost per pick and the aggregate record.

American odds:
- favorite (-120): win pays +units, loss costs |odds|/100 * units
- underdog (+180): win pays odds/100 * units, loss costs units
- push and pending are 0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from ..db.picks import EditorPick, PickResult


@dataclass(frozen=True)
class UnitsResult:
    units_won: float = 0.0
    units_lost: float = 0.0

    @property
    def net_units(self) -> float:
        return self.units_won - self.units_lost


ZERO = UnitsResult()


def parse_american_odds(value: str | int | float | None) -> int | None:
    """Parse "-110", "+180" or "110". An unsigned string is read as negative."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        if text.startswith(("+", "-")):
            return int(text)
        number = int(text)
    except ValueError:
        return None
    return -number if number > 0 else number


def calculate_units(
    result: str | None, odds: str | int | float | None, units: float | None
) -> UnitsResult:
    if not result or result in (PickResult.pending.value, PickResult.push.value) or not units:
        return ZERO
    price = parse_american_odds(odds)
    if price is None:
        return ZERO

    if result == PickResult.won.value:
        if price < 0:
            return UnitsResult(units_won=units)
        return UnitsResult(units_won=price / 100 * units)
    if result == PickResult.lost.value:
        if price < 0:
            return UnitsResult(units_lost=abs(price) / 100 * units)
        return UnitsResult(units_lost=units)
    return ZERO


@dataclass
class PickStats:
    won: int = 0
    lost: int = 0
    push: int = 0
    pending: int = 0
    units_won: float = 0.0
    units_lost: float = 0.0
    cumulative: list[dict[str, Any]] = field(default_factory=list)

    @property
    def graded(self) -> int:
        return self.won + self.lost + self.push

    @property
    def win_rate(self) -> float | None:
        if not self.graded:
            return None
        return round(self.won / self.graded, 4)

    @property
    def net_units(self) -> float:
        return self.units_won - self.units_lost

    def to_dict(self) -> dict[str, Any]:
        return {
            "won": self.won,
            "lost": self.lost,
            "push": self.push,
            "pending": self.pending,
            "total": self.graded,
            "win_rate": self.win_rate,
            "units_won": round(self.units_won, 2),
            "units_lost": round(self.units_lost, 2),
            "net_units": round(self.net_units, 2),
            "cumulative": self.cumulative,
        }


def summarize_picks(picks: Iterable[EditorPick], sport_type: str | None = None) -> PickStats:
    """Record, units and a cumulative units series in creation order."""
    stats = PickStats()
    running = 0.0
    selected = [pick for pick in picks if sport_type is None or pick.sport_type == sport_type]
    for pick in sorted(selected, key=lambda p: (p.created_at, p.id)):
        result = pick.result or PickResult.pending.value
        if result == PickResult.pending.value:
            stats.pending += 1
            continue
        if result == PickResult.won.value:
            stats.won += 1
        elif result == PickResult.lost.value:
            stats.lost += 1
        elif result == PickResult.push.value:
            stats.push += 1

        units = calculate_units(result, pick.best_price, pick.units)
        stats.units_won += units.units_won
        stats.units_lost += units.units_lost
        running += units.net_units
        stats.cumulative.append(
            {
                "pick_id": pick.id,
                "date": pick.created_at.date().isoformat() if pick.created_at else None,
                "units": round(running, 2),
            }
        )
    return stats
