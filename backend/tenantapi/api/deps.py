"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from tenantapi.cache import ANONYMOUS_TENANT
from tenantapi.repositories.base import Pagination
from tenantapi.schemas.common import PaginationQuerySchema
from tenantapi.services._shared.base import ServiceContext

F = TypeVar("F", bound=Callable[..., Any])


def parse_pagination(default_limit: int = 10, max_limit: int = 100) -> Pagination:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_tenant() -> str:
    """Return the caller's organization id, or ``"anonymous"``.

    Verifies the access token optionally, so it is safe on public routes; an
    invalid token still fails through the JWT error loaders.
    """

    verify_jwt_in_request(optional=True)
    claims = get_jwt() or {}
    tenant = claims.get("organization_id")
    return str(tenant) if tenant else ANONYMOUS_TENANT


def service_context() -> ServiceContext:
    """Build the request-scoped context from the verified access token."""

    claims = get_jwt() or {}
    identity = get_jwt_identity()
    return ServiceContext(
        actor_id=str(identity) if identity is not None else None,
        tenant_id=claims.get("organization_id"),
    )


def tenant_rate_limit_key() -> str:
    """Flask-Limiter key: one bucket per organization."""

    return f"org:{current_tenant()}"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
