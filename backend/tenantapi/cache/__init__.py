"""Response cache: storage, policy and app wiring."""

from __future__ import annotations

from flask import Flask, current_app

from tenantapi.cache.policy import DEFAULT_CACHE_CONTROL, cache_control_for, extract_entity_type
from tenantapi.cache.store import ANONYMOUS_TENANT, CacheEntry, ResponseCache

EXTENSION_KEY = "response_cache"


def init_app(app: Flask) -> None:
    """Create the process-local :class:`ResponseCache` from app config."""
    app.extensions[EXTENSION_KEY] = ResponseCache(
        max_size=int(app.config.get("RESPONSE_CACHE_MAX_ENTRIES", 500)),
        ttl_seconds=float(app.config.get("RESPONSE_CACHE_TTL_SECONDS", 600)),
    )


def get_response_cache() -> ResponseCache:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "ANONYMOUS_TENANT",
    "CacheEntry",
    "DEFAULT_CACHE_CONTROL",
    "EXTENSION_KEY",
    "ResponseCache",
    "cache_control_for",
    "extract_entity_type",
    "get_response_cache",
    "init_app",
]
