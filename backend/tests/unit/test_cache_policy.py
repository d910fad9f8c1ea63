"""Unit tests for URL classification and Cache-Control policy."""

from __future__ import annotations

import pytest

from tenantapi.cache.policy import DEFAULT_CACHE_CONTROL, cache_control_for, extract_entity_type

POLICIES = {
    "users": "private, max-age=600",
    "organizations": "private, max-age=600",
    "orders": "private, no-cache",
}


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("/api/v1/users", "users"),
        ("/api/v1/users/abc", "users"),
        ("/api/organizations?page=2", "organizations"),
        ("/api/v2/orders/1", "orders"),
        ("/api/v1/usersx", None),
        ("/api/v1/health", None),
        ("/other/v1/users", None),
        ("", None),
    ],
)
def test_extract_entity_type(url, expected):
    assert extract_entity_type(url) == expected


def test_cache_control_per_entity_type():
    assert cache_control_for("users", POLICIES) == "private, max-age=600"
    assert cache_control_for("orders", POLICIES) == "private, no-cache"
    assert cache_control_for(None, POLICIES) == DEFAULT_CACHE_CONTROL
    assert cache_control_for("users", None) == DEFAULT_CACHE_CONTROL
