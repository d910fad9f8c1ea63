"""Digest helpers shared by the token authority and the response cache."""

from __future__ import annotations

import hashlib
import json
from typing import Any


def sha256_hex(data: str | bytes) -> str:
    """Return the hex SHA-256 digest of ``data`` (text is UTF-8 encoded)."""

    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def hash_token(token: str) -> str:
    """Digest a signed token before persistence; raw tokens are never stored."""

    return sha256_hex(token)


def build_cache_key(method: str, url: str, tenant_id: str) -> str:
    """Derive the response cache key for ``METHOD:url:tenant``.

    The tenant is part of the hashed material, so two tenants requesting the
    same URL always land on different keys.
    """

    return sha256_hex(f"{method.upper()}:{url}:{tenant_id}")


def compute_etag(body: Any) -> str:
    """Compute a strong validator for a response body.

    Bytes and text are hashed as-is. Any other value is serialized to
    canonical JSON (sorted keys, compact separators) first so logically equal
    payloads share an ETag.
    """

    if isinstance(body, (bytes, str)):
        return sha256_hex(body)
    canonical = json.dumps(body, sort_keys=True, separators=(",", ":"), default=str)
    return sha256_hex(canonical)


__all__ = ["build_cache_key", "compute_etag", "hash_token", "sha256_hex"]
