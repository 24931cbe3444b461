"""Tests for the editorial admin API.

Services are swapped for in-memory fakes through ``app.dependency_overrides``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from editorial.db.content import PageSchedule, ValueFindBundle
from editorial.db.jobs import BulkJobStatus
from editorial.dependencies import (
    get_catalog,
    get_content_store,
    get_generation_adapter,
    verify_api_key,
)
from editorial.services.errors import GenerationError
from main import app

from conftest import (
    NOW,
    FakeCatalog,
    make_configs,
    make_game,
    make_pick,
)

PREFIX = "/api/admin/editorial"


def _tomorrow() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=1)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(
        [
            make_game("1", kickoff=_tomorrow()),
            make_game("2", away="Dallas", home="Philadelphia", kickoff=_tomorrow()),
        ]
    )


@pytest.fixture
def client(store, catalog, generator):
    app.dependency_overrides[get_content_store] = lambda: store
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_generation_adapter] = lambda: generator
    app.dependency_overrides[verify_api_key] = lambda: ""
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAdminAuth:
    def test_missing_key_rejected(self, store):
        app.dependency_overrides[get_content_store] = lambda: store
        try:
            with patch("editorial.dependencies.auth.settings") as mock_settings:
                mock_settings.api_key = "k" * 40
                response = TestClient(app).get(f"{PREFIX}/completion-configs")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "ApiKey"

    def test_valid_key_accepted(self, store):
        app.dependency_overrides[get_content_store] = lambda: store
        try:
            with patch("editorial.dependencies.auth.settings") as mock_settings:
                mock_settings.api_key = "k" * 40
                response = TestClient(app).get(
                    f"{PREFIX}/completion-configs", headers={"X-API-Key": "k" * 40}
                )
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 200


# ---------------------------------------------------------------------------
# Completions
# ---------------------------------------------------------------------------


class TestBulkGenerate:
    def test_inline_run_reports_counters(self, client, store, generator):
        store.seed(*make_configs("nfl", ["spread_prediction"]))
        generator.failures["2"] = GenerationError("model timed out", kind="timeout")

        response = client.post(f"{PREFIX}/completions/bulk-generate", json={"sport_type": "nfl"})

        assert response.status_code == 200
        body = response.json()
        assert (body["generated"], body["errors"], body["skipped"]) == (1, 1, 0)
        assert body["cancelled"] is False
        assert {item["status"] for item in body["items"]} == {"generated", "error"}

    def test_second_run_is_a_noop(self, client, store):
        store.seed(*make_configs("nfl", ["spread_prediction"]))
        client.post(f"{PREFIX}/completions/bulk-generate", json={"sport_type": "nfl"})
        body = client.post(f"{PREFIX}/completions/bulk-generate", json={"sport_type": "nfl"}).json()
        assert body["generated"] == 0
        assert body["items"] == []

    def test_invalid_sport(self, client):
        response = client.post(f"{PREFIX}/completions/bulk-generate", json={"sport_type": "xfl"})
        assert response.status_code == 400


class TestBulkGenerateAsync:
    def test_dispatch_status_and_cancel(self, client, store):
        celery = MagicMock()
        celery.send_task.return_value = MagicMock(id="celery-task-1")
        with patch("editorial.celery_client.get_celery_app", return_value=celery):
            response = client.post(f"{PREFIX}/completions/bulk-generate-async", json={"sport_type": "NFL"})

        assert response.status_code == 202
        job_id = response.json()["job_id"]
        assert response.json()["status_url"].endswith(job_id)
        job = store.jobs[0]
        celery.send_task.assert_called_once_with("run_bulk_completion_generation", args=[job.id])
        assert job.celery_task_id == "celery-task-1"
        assert job.sport_type == "nfl"

        status_body = client.get(f"{PREFIX}/completions/bulk-generate-status/{job_id}").json()
        assert status_body["status"] == BulkJobStatus.pending.value
        assert status_body["total"] == 0

        cancel = client.post(f"{PREFIX}/completions/bulk-generate/{job_id}/cancel")
        assert cancel.status_code == 200
        assert cancel.json()["status"] == BulkJobStatus.cancelled.value
        assert cancel.json()["cancel_requested"] is True

        again = client.post(f"{PREFIX}/completions/bulk-generate/{job_id}/cancel")
        assert again.status_code == 409

    def test_cancel_running_job_sets_flag_only(self, client, store):
        celery = MagicMock()
        with patch("editorial.celery_client.get_celery_app", return_value=celery):
            job_id = client.post(f"{PREFIX}/completions/bulk-generate-async", json={}).json()["job_id"]
        store.jobs[0].status = BulkJobStatus.running.value

        body = client.post(f"{PREFIX}/completions/bulk-generate/{job_id}/cancel").json()

        assert body["status"] == BulkJobStatus.running.value
        assert body["cancel_requested"] is True

    def test_broker_outage_fails_job_with_503(self, client, store):
        celery = MagicMock()
        celery.send_task.side_effect = ConnectionError("redis refused connection")
        with patch("editorial.celery_client.get_celery_app", return_value=celery):
            response = client.post(f"{PREFIX}/completions/bulk-generate-async", json={"sport_type": "nfl"})

        assert response.status_code == 503
        job = store.jobs[0]
        assert job.status == BulkJobStatus.failed.value
        assert job.finished_at is not None
        assert job.celery_task_id is None
        assert "redis refused connection" in job.errors_json[0]["error"]

        status_body = client.get(f"{PREFIX}/completions/bulk-generate-status/{job.job_uuid}").json()
        assert status_body["status"] == BulkJobStatus.failed.value

    def test_bad_job_ids(self, client):
        assert client.get(f"{PREFIX}/completions/bulk-generate-status/not-a-uuid").status_code == 400
        missing = "00000000-0000-0000-0000-000000000000"
        assert client.get(f"{PREFIX}/completions/bulk-generate-status/{missing}").status_code == 404


class TestGenerateOne:
    def test_generates_and_stores(self, client, store):
        store.seed(*make_configs("nfl", ["spread_prediction"]))
        response = client.post(
            f"{PREFIX}/completions/generate",
            json={"sport_type": "nfl", "game_id": "1", "slot_type": "spread_prediction"},
        )
        assert response.status_code == 200
        assert response.json()["completion_text"] == "Analysis for game 1."
        assert response.json()["model_used"] == "test-model"
        assert ("nfl", "1", "spread_prediction") in store.completions

    def test_disabled_slot_conflict(self, client, store):
        store.seed(*make_configs("nfl", ["spread_prediction"], enabled=False))
        response = client.post(
            f"{PREFIX}/completions/generate",
            json={"sport_type": "nfl", "game_id": "1", "slot_type": "spread_prediction"},
        )
        assert response.status_code == 409

    def test_unknown_game(self, client, store):
        store.seed(*make_configs("nfl", ["spread_prediction"]))
        response = client.post(
            f"{PREFIX}/completions/generate",
            json={"sport_type": "nfl", "game_id": "999", "slot_type": "spread_prediction"},
        )
        assert response.status_code == 404

    def test_generation_failure_is_bad_gateway(self, client, store, generator):
        store.seed(*make_configs("nfl", ["spread_prediction"]))
        generator.failures["1"] = GenerationError("no JSON", kind="malformed")
        response = client.post(
            f"{PREFIX}/completions/generate",
            json={"sport_type": "nfl", "game_id": "1", "slot_type": "spread_prediction"},
        )
        assert response.status_code == 502
        assert store.completions == {}

    def test_payload_preview(self, client):
        response = client.get(f"{PREFIX}/payload/nfl/1", params={"slot_type": "ou_prediction"})
        assert response.status_code == 200
        assert response.json()["game"]["home_team"] == "Buffalo"


# ---------------------------------------------------------------------------
# Value finds
# ---------------------------------------------------------------------------


def _schedule(sport: str = "nfl") -> PageSchedule:
    return PageSchedule(
        sport_type=sport,
        scheduled_time=time(9, 0),
        enabled=True,
        system_prompt="Find value.",
        schedule_frequency="weekly",
        day_of_week=1,
        auto_publish=False,
    )


class TestValueFinds:
    def test_generate_preview_publish_delete(self, client, store):
        store.seed(_schedule())

        created = client.post(f"{PREFIX}/value-finds/nfl/generate")
        assert created.status_code == 201
        bundle_id = created.json()["id"]
        assert created.json()["published"] is False
        assert created.json()["page_header"]["summary_text"] == "Two spots stand out."

        preview = client.get(f"{PREFIX}/value-finds/nfl/preview")
        assert preview.json()["id"] == bundle_id

        published = client.patch(f"{PREFIX}/value-finds/{bundle_id}", json={"published": True})
        assert published.json()["published"] is True

        assert client.delete(f"{PREFIX}/value-finds/{bundle_id}").status_code == 204
        assert store.value_finds == []

    def test_missing_schedule_404(self, client):
        assert client.post(f"{PREFIX}/value-finds/nba/generate").status_code == 404

    def test_preview_without_bundle_404(self, client):
        assert client.get(f"{PREFIX}/value-finds/nfl/preview").status_code == 404

    def test_publish_unknown_bundle_404(self, client):
        assert client.patch(f"{PREFIX}/value-finds/77", json={"published": True}).status_code == 404

    def test_failed_commit_leaves_bundle_unchanged(self, client, store):
        bundle = ValueFindBundle(
            sport_type="nfl",
            analysis_date=date(2025, 11, 20),
            high_value_badges=[],
            editor_cards=[],
            value_picks=[],
            published=False,
            created_at=NOW,
        )
        store.seed(bundle)
        store.commit_failures = 1

        response = client.patch(f"{PREFIX}/value-finds/{bundle.id}", json={"published": True})

        assert response.status_code == 503
        assert bundle.published is False


# ---------------------------------------------------------------------------
# Registry and schedules
# ---------------------------------------------------------------------------


class TestConfigsAndSchedules:
    def test_list_and_filter_configs(self, client, store):
        store.seed(*make_configs("nfl"), *make_configs("nba"))
        assert len(client.get(f"{PREFIX}/completion-configs").json()) == 6
        nba = client.get(f"{PREFIX}/completion-configs", params={"sport_type": "nba"}).json()
        assert {cfg["sport_type"] for cfg in nba} == {"nba"}

    def test_kill_switch_toggle(self, client, store):
        config = make_configs("nfl", ["spread_prediction"])[0]
        store.seed(config)
        response = client.patch(
            f"{PREFIX}/completion-configs/{config.id}",
            json={"enabled": False, "updated_by": "editor@example.com"},
        )
        assert response.status_code == 200
        assert response.json()["enabled"] is False
        assert response.json()["updated_by"] == "editor@example.com"

    def test_update_unknown_config(self, client):
        assert client.patch(f"{PREFIX}/completion-configs/9", json={"enabled": False}).status_code == 404

    def test_update_schedule(self, client, store):
        store.seed(_schedule())
        response = client.patch(
            f"{PREFIX}/schedules/nfl",
            json={"scheduled_time": "10:30:00", "schedule_frequency": "daily", "auto_publish": True},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["scheduled_time"] == "10:30:00"
        assert body["schedule_frequency"] == "daily"
        assert body["auto_publish"] is True
        assert [s["sport_type"] for s in client.get(f"{PREFIX}/schedules").json()] == ["nfl"]

    def test_schedule_day_out_of_range(self, client, store):
        store.seed(_schedule())
        assert client.patch(f"{PREFIX}/schedules/nfl", json={"day_of_week": 7}).status_code == 422


# ---------------------------------------------------------------------------
# Editor picks
# ---------------------------------------------------------------------------


class TestEditorPicks:
    def test_create_publish_grade_delete(self, client, store):
        created = client.post(
            f"{PREFIX}/editor-picks",
            json={
                "sport_type": "nfl",
                "game_id": "1",
                "selected_bet_type": "spread",
                "editors_notes": "Bills at home.",
                "best_price": "-110",
                "units": 1.5,
            },
        )
        assert created.status_code == 201
        pick_id = created.json()["id"]
        assert created.json()["is_published"] is False
        assert store.picks[0].archived_game_data["home_team"] == "Buffalo"

        published = client.patch(f"{PREFIX}/editor-picks/{pick_id}/publish", json={"published": True})
        assert published.json()["is_published"] is True

        graded = client.patch(f"{PREFIX}/editor-picks/{pick_id}/result", json={"result": "won"})
        assert graded.json()["result"] == "won"

        stats = client.get(f"{PREFIX}/editor-picks/stats").json()
        assert stats["won"] == 1
        assert stats["units_won"] == 1.5

        assert client.delete(f"{PREFIX}/editor-picks/{pick_id}").status_code == 204
        assert store.picks == []

    def test_invalid_bet_type(self, client):
        response = client.post(
            f"{PREFIX}/editor-picks",
            json={"sport_type": "nfl", "game_id": "1", "selected_bet_type": "parlay"},
        )
        assert response.status_code == 422

    def test_unknown_pick(self, client):
        assert client.patch(f"{PREFIX}/editor-picks/5/result", json={"result": "lost"}).status_code == 404
        assert client.delete(f"{PREFIX}/editor-picks/5").status_code == 404

    def test_stats_only_count_published(self, client, store):
        store.seed(
            make_pick("1", result="won"),
            make_pick("2", result="won", is_published=False),
        )
        stats = client.get(f"{PREFIX}/editor-picks/stats").json()
        assert stats["won"] == 1
