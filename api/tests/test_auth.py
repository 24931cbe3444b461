"""Tests for the X-API-Key dependencies."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException

from editorial.dependencies.auth import is_admin_request, key_matches, verify_api_key

CONFIGURED_KEY = "editorial_" + "k" * 32


@pytest.fixture
def mock_request() -> MagicMock:
    request = MagicMock()
    request.client.host = "127.0.0.1"
    request.url.path = "/api/admin/editorial/completion-configs"
    return request


class TestVerifyApiKey:
    @pytest.mark.asyncio
    async def test_valid_key_accepted(self, mock_request):
        with patch("editorial.dependencies.auth.settings") as mock_settings:
            mock_settings.api_key = CONFIGURED_KEY
            assert await verify_api_key(mock_request, CONFIGURED_KEY) == CONFIGURED_KEY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provided,detail", [(None, "Missing API key"), ("", "Missing API key"), ("nope", "Invalid API key")])
    async def test_rejected(self, mock_request, provided, detail):
        with patch("editorial.dependencies.auth.settings") as mock_settings:
            mock_settings.api_key = CONFIGURED_KEY
            with pytest.raises(HTTPException) as exc_info:
                await verify_api_key(mock_request, provided)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == detail
        assert exc_info.value.headers == {"WWW-Authenticate": "ApiKey"}

    @pytest.mark.asyncio
    async def test_request_without_client_info(self):
        request = MagicMock()
        request.client = None
        request.url.path = "/api/admin/editorial/schedules"
        with patch("editorial.dependencies.auth.settings") as mock_settings:
            mock_settings.api_key = CONFIGURED_KEY
            with pytest.raises(HTTPException):
                await verify_api_key(request, "wrong")

    @pytest.mark.asyncio
    async def test_no_configured_key_allows_request(self, mock_request):
        with patch("editorial.dependencies.auth.settings") as mock_settings:
            mock_settings.api_key = None
            assert await verify_api_key(mock_request, None) == ""


class TestIsAdminRequest:
    @pytest.mark.asyncio
    async def test_valid_key_is_admin(self):
        with patch("editorial.dependencies.auth.settings") as mock_settings:
            mock_settings.api_key = CONFIGURED_KEY
            assert await is_admin_request(CONFIGURED_KEY) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provided", [None, "", "wrong"])
    async def test_anything_else_is_reader(self, provided):
        with patch("editorial.dependencies.auth.settings") as mock_settings:
            mock_settings.api_key = CONFIGURED_KEY
            assert await is_admin_request(provided) is False

    def test_no_configured_key_never_matches(self):
        with patch("editorial.dependencies.auth.settings") as mock_settings:
            mock_settings.api_key = None
            assert key_matches("anything") is False
