"""Error taxonomy for the editorial pipeline.

Item-level errors (GenerationError, ConfigMismatch) are caught and
aggregated inside bulk operations. Setup errors (InvalidSportError) and
state-store failures (PersistenceError) propagate to the caller.
"""

from __future__ import annotations


class EditorialError(Exception):
    """Base class for editorial pipeline errors."""


class InvalidSportError(EditorialError, ValueError):
    """Raised when a sport type is not one of the supported sports."""


class GenerationError(EditorialError):
    """Raised when the generation service times out, fails, or returns an
    artifact that does not match the expected schema.

    ``kind`` is one of ``timeout``, ``api_error``, ``malformed``,
    ``not_configured``.
    """

    def __init__(self, message: str, kind: str = "api_error") -> None:
        super().__init__(message)
        self.kind = kind


class ConfigMismatch(EditorialError):
    """Raised when generation is requested for a disabled (sport, slot) config.

    Callers treat this as a skip, not a failure.
    """


class PersistenceError(EditorialError):
    """Raised when a state-store write fails. No partial change is kept."""


class NotFoundError(EditorialError, LookupError):
    """Raised when a publication transition targets a row that does not exist."""
