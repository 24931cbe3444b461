"""Map editorial exceptions onto HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..services.errors import (
    ConfigMismatch,
    GenerationError,
    InvalidSportError,
    NotFoundError,
    PersistenceError,
)


def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (InvalidSportError, ValueError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, ConfigMismatch):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, GenerationError):
        if exc.kind == "not_configured":
            return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Generation failed ({exc.kind}): {exc}",
        )
    if isinstance(exc, PersistenceError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Change was not saved: {exc}",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


HANDLED_ERRORS = (
    NotFoundError,
    InvalidSportError,
    ValueError,
    ConfigMismatch,
    GenerationError,
    PersistenceError,
)
