"""API v1 blueprint package bundling versioned routes."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

# Import blueprints *only here* to keep imports localized and avoid cycles.
from .auth import bp as auth_bp  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .orders import bp as orders_bp  # noqa: E402
from .organizations import bp as organizations_bp  # noqa: E402
from .users import bp as users_bp  # noqa: E402

# Each tuple: (blueprint, url_prefix_relative_to_version)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),  # -> /api/v1/health, /api/v1/ready
    (auth_bp, "/auth"),
    (users_bp, "/users"),
    (organizations_bp, "/organizations"),
    (orders_bp, "/orders"),
]
