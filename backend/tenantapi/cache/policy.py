"""URL classification and ``Cache-Control`` policy for cached responses."""

from __future__ import annotations

import re
from collections.abc import Mapping

#: Entity types whose responses can be invalidated as a group.
ENTITY_TYPES = ("users", "organizations", "orders")

DEFAULT_CACHE_CONTROL = "private, no-cache"

_ENTITY_RE = re.compile(r"^/api(?:/v\d+)?/(users|organizations|orders)(?=[/?#]|$)")


def extract_entity_type(url: str) -> str | None:
    """Return the entity segment of an API URL, or ``None`` when unclassified.

    >>> extract_entity_type("/api/v1/orders?page=2")
    'orders'
    >>> extract_entity_type("/api/users/42")
    'users'
    >>> extract_entity_type("/api/v1/health") is None
    True
    """
    match = _ENTITY_RE.match(url or "")
    return match.group(1) if match else None


def cache_control_for(entity_type: str | None, policies: Mapping[str, str] | None = None) -> str:
    """Resolve the ``Cache-Control`` header advertised for ``entity_type``."""
    if entity_type is None or not policies:
        return DEFAULT_CACHE_CONTROL
    return policies.get(entity_type, DEFAULT_CACHE_CONTROL)
