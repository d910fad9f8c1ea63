"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Access-token signing key. Also consumed by ``flask-jwt-extended`` so
        the authentication gate verifies the same tokens the token authority
        issues.
    JWT_REFRESH_SECRET_KEY: str
        Separate key for refresh tokens. Must differ from ``JWT_SECRET_KEY``.
    ACCESS_TOKEN_EXPIRES_SECONDS / REFRESH_TOKEN_EXPIRES_SECONDS: int
        Token lifetimes (1 hour / 30 days by default).
    JWT_DECODE_LEEWAY: int
        Clock-skew tolerance in seconds applied when verifying tokens.
    REFRESH_TOKEN_BACKEND: str
        ``sqlalchemy`` (default), ``redis`` or ``memory``.
    RESPONSE_CACHE_MAX_ENTRIES / RESPONSE_CACHE_TTL_SECONDS: int
        Capacity and time-to-live of the in-process response cache.
    CACHE_CONTROL_POLICIES: Mapping[str, str]
        ``Cache-Control`` value advertised per entity type.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    APP_ENV = os.getenv(ENV_VAR, "development").strip().lower()
    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT_ACCESS")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET_KEY", "CHANGE_ME_JWT_REFRESH")
    JWT_ALGORITHM = "HS256"
    JWT_ISSUER = os.getenv("JWT_ISSUER") or None
    JWT_DECODE_LEEWAY = env_int("JWT_DECODE_LEEWAY", 0)
    ACCESS_TOKEN_EXPIRES_SECONDS = env_int("ACCESS_TOKEN_EXPIRES_SECONDS", 3600)
    REFRESH_TOKEN_EXPIRES_SECONDS = env_int("REFRESH_TOKEN_EXPIRES_SECONDS", 30 * 24 * 3600)
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sqlalchemy")

    # DB / Redis
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Response cache
    RESPONSE_CACHE_ENABLED = env_bool("RESPONSE_CACHE_ENABLED", True)
    RESPONSE_CACHE_MAX_ENTRIES = env_int("RESPONSE_CACHE_MAX_ENTRIES", 500)
    RESPONSE_CACHE_TTL_SECONDS = env_int("RESPONSE_CACHE_TTL_SECONDS", 600)
    CACHE_CONTROL_MAX_AGE = env_int("CACHE_CONTROL_MAX_AGE", 600)
    CACHE_CONTROL_POLICIES: Mapping[str, str] = {
        "users": f"private, max-age={CACHE_CONTROL_MAX_AGE}",
        "organizations": f"private, max-age={CACHE_CONTROL_MAX_AGE}",
        "orders": "private, no-cache",
    }

    # Rate limiting
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    ORGANIZATION_RATE_LIMIT = os.getenv("ORGANIZATION_RATE_LIMIT", "30 per minute")

    # Flask & JSON
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limits.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Pins the JWT secrets so tokens are reproducible across runs.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "testing-access-secret-with-enough-bytes"
    JWT_REFRESH_SECRET_KEY = "testing-refresh-secret-with-enough-bytes"
    REFRESH_TOKEN_BACKEND = "sqlalchemy"
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    USE_PROXYFIX = False
    PROPAGATE_EXCEPTIONS = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
