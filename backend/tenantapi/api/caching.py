"""HTTP side of the response cache: view decorators for reads and mutations.

``@cached_response`` wraps GET views::

    lookup -> HIT: replay the stored body (or 304)
           -> MISS: run the view, store 2xx bodies, answer (or 304)

``@invalidates("orders")`` wraps mutating views and drops the affected
entries once the view answered 2xx. Cache failures are logged and never turn
into request failures.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, Literal, TypeVar

from flask import Response, current_app, request

from tenantapi.api.deps import current_tenant
from tenantapi.api.etag import client_has_current, not_modified
from tenantapi.cache import cache_control_for, extract_entity_type, get_response_cache
from tenantapi.core.hashing import compute_etag

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)

CACHE_HEADER = "X-Cache"
CACHE_KEY_HEADER = "X-Cache-Key"
CACHE_AGE_HEADER = "X-Cache-Age"


def _request_url() -> str:
    # full_path always ends with "?" when there is no query string
    return request.full_path.rstrip("?")


def _cache_control(url: str) -> str:
    return cache_control_for(
        extract_entity_type(url), current_app.config.get("CACHE_CONTROL_POLICIES")
    )


def _replay(entry: Any, headers: dict[str, str]) -> Response:
    response = Response(entry.body, status=entry.status_code)
    for name, value in entry.headers.items():
        response.headers[name] = value
    response.set_etag(entry.etag)
    for name, value in headers.items():
        response.headers[name] = value
    return response


def cached_response(view: F) -> F:
    """Serve GET responses from the tenant-keyed response cache."""

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any):
        if request.method != "GET" or not current_app.config.get("RESPONSE_CACHE_ENABLED", True):
            return view(*args, **kwargs)

        cache = get_response_cache()
        tenant = current_tenant()
        url = _request_url()
        cache_control = _cache_control(url)

        try:
            entry = cache.lookup("GET", url, tenant)
        except Exception:
            log.exception("cache.lookup_failed", extra={"tenant_id": tenant})
            entry = None

        if entry is not None:
            headers = {
                "Cache-Control": cache_control,
                CACHE_HEADER: "HIT",
                CACHE_KEY_HEADER: entry.key,
                CACHE_AGE_HEADER: str(int(entry.age(cache.now()))),
            }
            log.debug(
                "cache.hit",
                extra={"cache_key": entry.key, "entity_type": entry.entity_type, "tenant_id": tenant},
            )
            if client_has_current(request, entry.etag):
                return not_modified(entry.etag, headers)
            return _replay(entry, headers)

        started_at = cache.now()
        response = current_app.make_response(view(*args, **kwargs))
        if not 200 <= response.status_code < 300:
            return response

        body = response.get_data()
        etag = compute_etag(body)
        key = cache.key_for("GET", url, tenant)
        try:
            cache.store(
                "GET",
                url,
                tenant,
                body,
                response.status_code,
                {"Content-Type": response.content_type or "application/json"},
                started_at=started_at,
            )
        except Exception:
            log.exception("cache.store_failed", extra={"cache_key": key, "tenant_id": tenant})

        headers = {"Cache-Control": cache_control, CACHE_HEADER: "MISS", CACHE_KEY_HEADER: key}
        log.debug("cache.miss", extra={"cache_key": key, "tenant_id": tenant})
        if client_has_current(request, etag):
            return not_modified(etag, headers)
        response.set_etag(etag)
        for name, value in headers.items():
            response.headers[name] = value
        return response

    return wrapper  # type: ignore[return-value]


def invalidates(
    *entity_types: str, scope: Literal["tenant", "global"] = "tenant"
) -> Callable[[F], F]:
    """Invalidate cached ``entity_types`` after a successful mutation.

    ``scope="tenant"`` drops only the caller's entries; ``scope="global"``
    drops them for every tenant (used for resources every tenant can read).
    """

    if not entity_types:
        raise ValueError("invalidates() needs at least one entity type")

    def decorator(view: F) -> F:
        @functools.wraps(view)
        def wrapper(*args: Any, **kwargs: Any):
            response = current_app.make_response(view(*args, **kwargs))
            if not 200 <= response.status_code < 300:
                return response
            tenant = None if scope == "global" else current_tenant()
            cache = get_response_cache()
            for entity_type in entity_types:
                try:
                    removed = cache.invalidate(entity_type, tenant)
                except Exception:
                    log.exception("cache.invalidate_failed", extra={"entity_type": entity_type})
                    continue
                log.info(
                    "cache.invalidated",
                    extra={"entity_type": entity_type, "tenant_id": tenant, "removed": removed},
                )
            return response

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["cached_response", "invalidates"]
