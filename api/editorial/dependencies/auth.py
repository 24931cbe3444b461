"""X-API-Key authentication.

Admin routes require a valid key. Read routes accept an optional key: a
valid one selects the admin view, anything else is an ordinary reader.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from ..config import settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def _client_context(request: Request) -> dict[str, str]:
    return {
        "client_ip": request.client.host if request.client else "unknown",
        "path": request.url.path,
    }


def key_matches(api_key: str | None) -> bool:
    """Constant-time comparison against the configured key."""
    if not api_key or not settings.api_key:
        return False
    return secrets.compare_digest(api_key, settings.api_key)


async def verify_api_key(
    request: Request,
    api_key: str | None = Depends(API_KEY_HEADER),
) -> str:
    """Require a valid admin key. Returns the key.

    With no key configured (local development) every request passes;
    ``validate_env`` refuses that in production.
    """
    if not settings.api_key:
        logger.warning("API_KEY not configured - allowing unauthenticated admin request")
        return ""

    if not api_key:
        logger.warning("admin_api_key_missing", extra=_client_context(request))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not key_matches(api_key):
        logger.warning("admin_api_key_invalid", extra=_client_context(request))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


async def is_admin_request(api_key: str | None = Depends(API_KEY_HEADER)) -> bool:
    """True only for a valid key. Never raises."""
    return key_matches(api_key)
