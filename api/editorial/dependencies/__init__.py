"""FastAPI dependencies for the editorial API."""

from .auth import is_admin_request, verify_api_key
from .services import get_catalog, get_content_store, get_generation_adapter

__all__ = [
    "get_catalog",
    "get_content_store",
    "get_generation_adapter",
    "is_admin_request",
    "verify_api_key",
]
