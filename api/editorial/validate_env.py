"""Fail-fast environment validation for the editorial API and worker."""

from __future__ import annotations

import os
from functools import lru_cache
from urllib.parse import urlparse

ALLOWED_ENVIRONMENTS = {"development", "staging", "production"}
MAX_PUBLICATION_STALENESS_SECONDS = 60


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"{name} is required and must be set before startup.")
    return value.strip()


def _validate_non_local_url(name: str, value: str) -> None:
    host = urlparse(value).hostname
    if not host:
        raise RuntimeError(f"{name} must be a valid URL (missing hostname).")
    if host in {"localhost", "127.0.0.1"}:
        raise RuntimeError(f"{name} must not point to localhost in production.")


def _validate_staleness() -> None:
    raw = os.getenv("PUBLICATION_STALENESS_SECONDS")
    if raw is None:
        return
    try:
        seconds = int(raw)
    except ValueError as exc:
        raise RuntimeError("PUBLICATION_STALENESS_SECONDS must be an integer.") from exc
    if not 0 <= seconds <= MAX_PUBLICATION_STALENESS_SECONDS:
        raise RuntimeError(
            f"PUBLICATION_STALENESS_SECONDS must be between 0 and {MAX_PUBLICATION_STALENESS_SECONDS}."
        )


@lru_cache(maxsize=1)
def validate_env() -> None:
    """Validate required environment variables before the service starts."""
    environment = _require_env("ENVIRONMENT")
    if environment not in ALLOWED_ENVIRONMENTS:
        allowed = ", ".join(sorted(ALLOWED_ENVIRONMENTS))
        raise RuntimeError(f"ENVIRONMENT must be one of: {allowed}.")

    database_url = _require_env("DATABASE_URL")
    _validate_staleness()

    if environment != "production":
        return

    _validate_non_local_url("DATABASE_URL", database_url)
    _validate_non_local_url("FEED_DATABASE_URL", _require_env("FEED_DATABASE_URL"))
    parsed = urlparse(database_url)
    if parsed.username == "postgres" and parsed.password == "postgres":
        raise RuntimeError("DATABASE_URL must not use default postgres credentials in production.")

    _require_env("API_KEY")
    _require_env("OPENAI_API_KEY")

    allowed_cors = _require_env("ALLOWED_CORS_ORIGINS")
    if "localhost" in allowed_cors or "127.0.0.1" in allowed_cors:
        raise RuntimeError("ALLOWED_CORS_ORIGINS must not include localhost in production.")
