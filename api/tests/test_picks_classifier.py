"""Tests for the editor picks classifier."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from editorial.services.picks_classifier import (
    GAME_ARCHIVED,
    GAME_FOUND,
    GAME_MISSING,
    classify_picks,
    resolve_pick_game,
)
from editorial.utils.datetime_utils import EASTERN

from conftest import NOW, make_game, make_pick


def _game_on(day: int, game_id: str):
    return make_game(game_id, kickoff=datetime(2025, 11, day, 20, 15, tzinfo=EASTERN))


def _picks_by_day(*days: int):
    picks, games = [], {}
    for index, day in enumerate(days, start=1):
        pick = make_pick(str(day))
        pick.id = index
        picks.append(pick)
        game = _game_on(day, str(day))
        games[game.key] = game
    return picks, games


class TestGraceWindow:
    def test_reader_sees_two_day_old_pick_but_not_three(self):
        """Today is 2025-11-20: a 11-18 pick shows, a 11-17 pick is gone."""
        picks, games = _picks_by_day(17, 18, 20, 22)

        buckets = classify_picks(picks, games, NOW, is_admin=False, grace_days=2)

        assert [entry.pick.game_id for entry in buckets.active] == ["20", "22"]
        assert [entry.pick.game_id for entry in buckets.historical] == ["18"]
        assert buckets.draft == []

    def test_game_today_is_not_past(self):
        picks, games = _picks_by_day(20)
        buckets = classify_picks(picks, games, NOW, is_admin=False, grace_days=2)
        assert buckets.active[0].is_past is False

    def test_admin_has_no_cutoff(self):
        picks, games = _picks_by_day(1, 17, 18)
        buckets = classify_picks(picks, games, NOW, is_admin=True, grace_days=2)
        assert [entry.pick.game_id for entry in buckets.historical] == ["1", "17", "18"]
        assert all(entry.is_past for entry in buckets.historical)

    def test_grace_defaults_to_settings(self):
        picks, games = _picks_by_day(18)
        buckets = classify_picks(picks, games, NOW, is_admin=False)
        assert len(buckets.historical) == 1


class TestDrafts:
    def test_readers_never_see_drafts(self):
        draft = make_pick("20", is_published=False)
        game = _game_on(20, "20")
        buckets = classify_picks([draft], {game.key: game}, NOW, is_admin=False)
        assert (buckets.draft, buckets.active, buckets.historical) == ([], [], [])

    def test_admin_gets_draft_bucket(self):
        draft = make_pick("17", is_published=False)
        game = _game_on(17, "17")
        buckets = classify_picks([draft], {game.key: game}, NOW, is_admin=True)
        assert len(buckets.draft) == 1
        assert buckets.historical == []


class TestResolvePickGame:
    def test_found_in_catalog(self):
        game = make_game("7")
        status, data, game_date = resolve_pick_game(make_pick("7"), {game.key: game})
        assert status == GAME_FOUND
        assert data["home_team"] == "Buffalo"
        assert game_date == date(2025, 11, 21)

    def test_archived_snapshot_used_when_feed_drops_game(self):
        pick = make_pick(
            "7",
            archived_game_data={"game_id": "7", "home_team": "Buffalo", "game_date": "2025-11-18"},
        )
        status, data, game_date = resolve_pick_game(pick, {})
        assert status == GAME_ARCHIVED
        assert data["home_team"] == "Buffalo"
        assert game_date == date(2025, 11, 18)

    def test_missing_entry(self):
        status, data, game_date = resolve_pick_game(make_pick("7", "cfb"), {})
        assert status == GAME_MISSING
        assert data == {"sport_type": "cfb", "game_id": "7", "message": "Game data not found"}
        assert game_date is None

    def test_sport_scoped_lookup(self):
        """An nfl game never satisfies a cfb pick with the same id."""
        game = make_game("42", "nfl")
        status, _, _ = resolve_pick_game(make_pick("42", "cfb"), {game.key: game})
        assert status == GAME_MISSING

    @pytest.mark.parametrize("is_admin", [True, False])
    def test_missing_game_is_still_listed(self, is_admin):
        buckets = classify_picks([make_pick("gone")], {}, NOW, is_admin=is_admin)
        assert len(buckets.active) == 1
        assert buckets.active[0].game_status == GAME_MISSING

    def test_archived_past_pick_hidden_for_readers(self):
        pick = make_pick("old", archived_game_data={"game_date": "2025-11-10"})
        buckets = classify_picks([pick], {}, NOW, is_admin=False, grace_days=2)
        assert (buckets.active, buckets.historical) == ([], [])
