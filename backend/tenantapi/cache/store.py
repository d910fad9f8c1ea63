"""In-process, tenant-keyed response cache with LRU eviction and a fixed TTL."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tenantapi.cache.policy import extract_entity_type
from tenantapi.core.hashing import build_cache_key, compute_etag

ANONYMOUS_TENANT = "anonymous"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """
    One cached response.

    :ivar key: Cache key (digest of method, URL and tenant).
    :ivar body: Response payload as produced by the handler.
    :ivar status_code: HTTP status (always 2xx).
    :ivar headers: Headers replayed on a hit (e.g. ``Content-Type``).
    :ivar entity_type: ``users``/``organizations``/``orders`` or ``None``.
    :ivar tenant_id: Owning tenant, ``"anonymous"`` for unauthenticated calls.
    :ivar timestamp: Clock reading at store time.
    :ivar etag: Strong validator derived from ``body``.
    """

    key: str
    body: Any
    status_code: int
    headers: Mapping[str, str]
    entity_type: str | None
    tenant_id: str
    timestamp: float
    etag: str = field(repr=False)

    def age(self, now: float) -> float:
        return max(0.0, now - self.timestamp)


class ResponseCache:
    """
    Bounded LRU cache of successful GET responses.

    Parameters
    ----------
    max_size : int
        Hard capacity. When exceeded, expired entries are dropped first, then
        the least recently used ones.
    ttl_seconds : float
        Fixed time-to-live. Expired entries are never served.
    clock : Callable[[], float]
        Monotonic time source; injectable for tests.

    Notes
    -----
    A single lock guards the entry map, counters and invalidation fences.
    Key hashing and ETag computation happen before the lock is taken.

    ``invalidate`` records a per ``(entity_type, tenant)`` fence (and a
    global one when no tenant is given). ``store`` calls that pass the time
    the response computation *started* are rejected when they began before
    the latest matching fence, so a slow read cannot write pre-mutation
    data back after the mutation invalidated it.
    """

    def __init__(
        self,
        max_size: int = 500,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.max_size = int(max_size)
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._fences: dict[tuple[str, str | None], float] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._closed = False

    # ---- Keys / time ----

    @staticmethod
    def key_for(method: str, url: str, tenant_id: str | None) -> str:
        return build_cache_key(method, url, tenant_id or ANONYMOUS_TENANT)

    def now(self) -> float:
        return self._clock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp >= self.ttl_seconds

    # ---- Read path ----

    def lookup(self, method: str, url: str, tenant_id: str | None = None) -> CacheEntry | None:
        """
        Return the live entry for ``(method, url, tenant)`` or ``None``.

        An expired entry is removed and reported as a miss. A hit moves the
        entry to the most-recently-used position.
        """
        key = self.key_for(method, url, tenant_id)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._expired(entry, now):
                del self._entries[key]
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry

    # ---- Write path ----

    def store(
        self,
        method: str,
        url: str,
        tenant_id: str | None,
        body: Any,
        status_code: int,
        headers: Mapping[str, str] | None = None,
        *,
        started_at: float | None = None,
    ) -> CacheEntry | None:
        """
        Cache a response and return the new entry.

        Returns ``None`` without caching when the status is not 2xx, the cache
        was shut down, or ``started_at`` precedes an invalidation fence for
        the URL's entity type.
        """
        if not 200 <= int(status_code) < 300:
            return None
        tenant = tenant_id or ANONYMOUS_TENANT
        key = self.key_for(method, url, tenant)
        etag = compute_etag(body)
        entity_type = extract_entity_type(url)

        with self._lock:
            if self._closed:
                return None
            if started_at is not None and self._fenced(entity_type, tenant, started_at):
                return None
            now = self._clock()
            entry = CacheEntry(
                key=key,
                body=body,
                status_code=int(status_code),
                headers=dict(headers or {}),
                entity_type=entity_type,
                tenant_id=tenant,
                timestamp=now,
                etag=etag,
            )
            self._entries[key] = entry
            self._entries.move_to_end(key)
            self._evict_locked(now)
            return entry

    def _fenced(self, entity_type: str | None, tenant: str, started_at: float) -> bool:
        if entity_type is None:
            return False
        fence = max(
            self._fences.get((entity_type, tenant), float("-inf")),
            self._fences.get((entity_type, None), float("-inf")),
        )
        return started_at < fence

    def _evict_locked(self, now: float) -> None:
        if len(self._entries) <= self.max_size:
            return
        for key in [k for k, e in self._entries.items() if self._expired(e, now)]:
            del self._entries[key]
            self._evictions += 1
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            self._evictions += 1

    # ---- Invalidation ----

    def invalidate(self, entity_type: str, tenant_id: str | None = None) -> int:
        """
        Drop cached responses of ``entity_type``.

        :param entity_type: ``users``, ``organizations`` or ``orders``.
        :param tenant_id: Restrict to one tenant; ``None`` drops every tenant.
        :returns: Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            self._fences[(entity_type, tenant_id)] = now
            doomed = [
                key
                for key, entry in self._entries.items()
                if entry.entity_type == entity_type
                and (tenant_id is None or entry.tenant_id == tenant_id)
            ]
            for key in doomed:
                del self._entries[key]
            horizon = now - self.ttl_seconds
            for fence_key in [k for k, ts in self._fences.items() if ts < horizon]:
                del self._fences[fence_key]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._fences.clear()

    def shutdown(self) -> None:
        """Clear the cache and refuse further stores."""
        with self._lock:
            self._entries.clear()
            self._fences.clear()
            self._closed = True

    # ---- Introspection ----

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._entries),
                "maxSize": self.max_size,
                "ttlSeconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
