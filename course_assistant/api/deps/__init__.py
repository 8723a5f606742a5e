"""API-specific dependencies."""

from .dependencies import (
    ServiceCache,
    build_service_cache,
    get_catalog,
    get_chat_service,
    get_policy,
    get_service_cache,
)

__all__ = [
    "ServiceCache",
    "build_service_cache",
    "get_catalog",
    "get_chat_service",
    "get_policy",
    "get_service_cache",
]
