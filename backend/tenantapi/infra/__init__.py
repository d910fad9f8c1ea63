"""Concrete adapters for service-layer ports and their app wiring."""

from __future__ import annotations

import logging

from flask import Flask, current_app

from tenantapi.services._shared.ports.refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
)
from tenantapi.services.auth.token_authority import TokenAuthority, TokenAuthorityConfig

log = logging.getLogger(__name__)

REFRESH_STORE_KEY = "refresh_token_store"
TOKEN_AUTHORITY_KEY = "token_authority"


def build_refresh_token_store(app: Flask) -> RefreshTokenStore:
    """Instantiate the adapter named by ``REFRESH_TOKEN_BACKEND``.

    :raises RuntimeError: For an unknown backend name.
    """
    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).strip().lower()
    if backend == "sqlalchemy":
        from tenantapi.infra.sqlalchemy.refresh_token_store import SQLAlchemyRefreshTokenStore

        return SQLAlchemyRefreshTokenStore()
    if backend == "redis":
        from tenantapi.core.extensions import get_redis
        from tenantapi.infra.redis.refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(
            get_redis(),
            retention_seconds=int(app.config.get("REFRESH_TOKEN_EXPIRES_SECONDS", 30 * 24 * 3600)),
        )
    if backend == "memory":
        return InMemoryRefreshTokenStore()
    raise RuntimeError(f"Unknown REFRESH_TOKEN_BACKEND: {backend!r}")


def init_app(app: Flask) -> None:
    """Attach the token authority and the refresh-token store to ``app.extensions``."""
    app.extensions[TOKEN_AUTHORITY_KEY] = TokenAuthority(TokenAuthorityConfig.from_mapping(app.config))
    app.extensions[REFRESH_STORE_KEY] = build_refresh_token_store(app)
    log.debug("infra.ready backend=%s", app.config.get("REFRESH_TOKEN_BACKEND"))


def get_token_authority() -> TokenAuthority:
    return current_app.extensions[TOKEN_AUTHORITY_KEY]


def get_refresh_token_store() -> RefreshTokenStore:
    return current_app.extensions[REFRESH_STORE_KEY]


__all__ = [
    "build_refresh_token_store",
    "get_refresh_token_store",
    "get_token_authority",
    "init_app",
]
