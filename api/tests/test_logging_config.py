"""Tests for structured JSON logging."""

from __future__ import annotations

import json
import logging
import sys
import uuid

import pytest

from editorial.logging_config import (
    MAX_LOG_VALUE_CHARS,
    JSONFormatter,
    bind_log_context,
    configure_logging,
    current_log_context,
)


def _record(message: str = "reconcile_item_failed", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="editorial.services.reconciliation",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def formatter() -> JSONFormatter:
    return JSONFormatter(service="editorial-worker", environment="test")


class TestJSONFormatter:
    def test_base_fields_and_extras(self, formatter):
        line = json.loads(formatter.format(_record(sport_type="nfl", game_id="42")))
        assert line["service"] == "editorial-worker"
        assert line["environment"] == "test"
        assert line["level"] == "warning"
        assert line["message"] == "reconcile_item_failed"
        assert (line["sport_type"], line["game_id"]) == ("nfl", "42")

    def test_bound_context_is_merged(self, formatter):
        with bind_log_context(job_id="abc", sport_type="nba"):
            line = json.loads(formatter.format(_record(sport_type="nfl")))
        assert line["job_id"] == "abc"
        # Explicit extras win over the bound context.
        assert line["sport_type"] == "nfl"

    def test_long_values_are_clipped(self, formatter):
        line = json.loads(formatter.format(_record(error="x" * (MAX_LOG_VALUE_CHARS + 50))))
        assert line["error"].endswith("...[truncated]")
        assert len(line["error"]) == MAX_LOG_VALUE_CHARS + len("...[truncated]")

    def test_non_json_values_are_stringified(self, formatter):
        job_uuid = uuid.UUID("12345678-1234-5678-1234-567812345678")
        line = json.loads(formatter.format(_record(job_id=job_uuid)))
        assert line["job_id"] == str(job_uuid)

    def test_exception_is_included(self, formatter):
        try:
            raise RuntimeError("connection reset")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        line = json.loads(formatter.format(record))
        assert "RuntimeError: connection reset" in line["exception"]


class TestBindLogContext:
    def test_nested_binding_is_restored(self):
        with bind_log_context(request_id="r1"):
            with bind_log_context(job_id="j1"):
                assert current_log_context() == {"request_id": "r1", "job_id": "j1"}
            assert current_log_context() == {"request_id": "r1"}
        assert current_log_context() == {}


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        names = ("httpx", "openai", "sqlalchemy.engine")
        quiet = {name: logging.getLogger(name).level for name in names}
        yield
        root.handlers = handlers
        root.setLevel(level)
        for name, previous in quiet.items():
            logging.getLogger(name).setLevel(previous)

    def test_production_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        configure_logging("editorial-api", "production")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_explicit_level_and_quiet_clients(self):
        configure_logging("editorial-api", "development", log_level="debug")
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("openai").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        configure_logging("editorial-api", "development", log_level="chatty")
        assert logging.getLogger().level == logging.INFO
