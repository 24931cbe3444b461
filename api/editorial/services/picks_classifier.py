"""Editor Picks Classifier.

Splits editor picks into draft / active / historical buckets using the
Eastern game date of each pick's game.

- A pick is past when its Eastern game date is strictly before Eastern today.
- Readers never see drafts; published picks are shown until they are more
  than ``grace_days`` days old.
- Admins see every pick with no cutoff; drafts get their own bucket.
- A pick whose game the catalog cannot resolve is still listed, using its
  archived snapshot when one exists or an explicit not-found entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from ..catalog.types import GameKey, GameView
from ..config import get_settings
from ..db.picks import EditorPick
from ..utils.datetime_utils import parse_feed_datetime, today_eastern

logger = logging.getLogger(__name__)

GAME_FOUND = "found"
GAME_ARCHIVED = "archived"
GAME_MISSING = "missing"


@dataclass
class ClassifiedPick:
    pick: EditorPick
    game_status: str
    game_data: dict[str, Any]
    game_date: date | None
    is_past: bool = False


@dataclass
class PickBuckets:
    draft: list[ClassifiedPick] = field(default_factory=list)
    active: list[ClassifiedPick] = field(default_factory=list)
    historical: list[ClassifiedPick] = field(default_factory=list)


def _snapshot_date(snapshot: Mapping[str, Any]) -> date | None:
    kickoff, _ = parse_feed_datetime(snapshot.get("game_date") or snapshot.get("kickoff"))
    return kickoff.date() if kickoff else None


def resolve_pick_game(
    pick: EditorPick, games_by_key: Mapping[GameKey, GameView]
) -> tuple[str, dict[str, Any], date | None]:
    """Return (status, game data, Eastern game date) for one pick."""
    game = games_by_key.get((pick.sport_type, str(pick.game_id)))
    if game is not None:
        return GAME_FOUND, game.to_snapshot(), game.game_date

    if pick.archived_game_data:
        snapshot = dict(pick.archived_game_data)
        return GAME_ARCHIVED, snapshot, _snapshot_date(snapshot)

    logger.debug(
        "editor_pick_game_missing",
        extra={"pick_id": pick.id, "sport_type": pick.sport_type, "game_id": pick.game_id},
    )
    return (
        GAME_MISSING,
        {
            "sport_type": pick.sport_type,
            "game_id": str(pick.game_id),
            "message": "Game data not found",
        },
        None,
    )


def classify_picks(
    picks: Iterable[EditorPick],
    games_by_key: Mapping[GameKey, GameView],
    now: datetime,
    is_admin: bool,
    grace_days: int | None = None,
) -> PickBuckets:
    if grace_days is None:
        grace_days = get_settings().pick_grace_days
    today = today_eastern(now)
    buckets = PickBuckets()

    for pick in picks:
        if not pick.is_published and not is_admin:
            continue

        status, game_data, game_date = resolve_pick_game(pick, games_by_key)
        # Unknown date counts as upcoming so the pick is never silently dropped.
        is_past = game_date is not None and game_date < today
        entry = ClassifiedPick(pick, status, game_data, game_date, is_past)

        if not pick.is_published:
            buckets.draft.append(entry)
        elif not is_past:
            buckets.active.append(entry)
        elif is_admin or (today - game_date).days <= grace_days:
            buckets.historical.append(entry)

    return buckets
