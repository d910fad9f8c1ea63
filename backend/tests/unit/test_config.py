"""Unit tests for configuration selection and env parsing."""

from __future__ import annotations

from tenantapi.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
)


def test_get_config_follows_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert get_config() is ProductionConfig
    monkeypatch.setenv("APP_ENV", "testing")
    assert get_config() is TestingConfig
    monkeypatch.setenv("APP_ENV", "unknown")
    assert get_config() is DevelopmentConfig


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "yes")
    monkeypatch.setenv("NUMBER", "42")
    monkeypatch.setenv("BLANK", " ")
    assert env_bool("FLAG", False) is True
    assert env_int("NUMBER", 1) == 42
    assert env_int("BLANK", 7) == 7
    assert env_bool("MISSING_FLAG_FOR_TEST", True) is True


def test_testing_config_uses_distinct_secrets():
    assert TestingConfig.JWT_SECRET_KEY != TestingConfig.JWT_REFRESH_SECRET_KEY
    assert TestingConfig.RATELIMIT_ENABLED is False
