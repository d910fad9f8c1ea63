"""Redis adapter for :class:`RefreshTokenStore`."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import redis  # type: ignore[import-untyped]

from tenantapi.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
    check_filters,
    check_values,
    matches,
)


def _b(s: bytes | None, default: str = "") -> str:
    return s.decode() if s is not None else default


def _members(raw: Iterable[Any]) -> list[str]:
    return sorted(m.decode() if isinstance(m, bytes | bytearray) else str(m) for m in raw)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh-token store.

    Layout
    ------
    * ``rt:{id}``: hash with the record fields.
    * ``rt:f:{family}``: set of record ids in a family.
    * ``rt:u:{user_id}``: set of record ids owned by a user.

    Every key expires after ``retention_seconds``; by then the signed token
    has expired too, so a missing record and an expired token fail the same
    way. Conditional updates use WATCH/MULTI/EXEC and retry on
    :class:`redis.WatchError`.

    :param r: A Redis client (already connected).
    :param retention_seconds: Key lifetime, normally the refresh-token lifetime.
    """

    r: redis.Redis
    retention_seconds: int = 30 * 24 * 3600

    # -------------------- helpers --------------------

    @staticmethod
    def _k(record_id: str) -> str:
        return f"rt:{record_id}"

    @staticmethod
    def _kf(token_family: str) -> str:
        return f"rt:f:{token_family}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _from_hash(record_id: str, h: Mapping[bytes, bytes]) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            id=record_id,
            token_hash=_b(h.get(b"token_hash")),
            user_id=_b(h.get(b"user_id")),
            token_family=_b(h.get(b"token_family")),
            revoked=_b(h.get(b"revoked"), "0") == "1",
            created_at=datetime.fromtimestamp(float(_b(h.get(b"created_at"), "0")), tz=UTC),
        )

    def _candidate_ids(self, filters: Mapping[str, Any]) -> list[str]:
        """Resolve filters to record ids using the primary key or an index set."""
        if "id" in filters:
            return [str(filters["id"])]
        if "token_family" in filters:
            return _members(self.r.smembers(self._kf(str(filters["token_family"]))))
        if "user_id" in filters:
            return _members(self.r.smembers(self._ku(str(filters["user_id"]))))
        raise ValueError("Redis store filters require one of: id, token_family, user_id.")

    # -------------------- API ------------------------

    def find_by_id(self, record_id: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(record_id))
        if not h:
            return None
        return self._from_hash(record_id, h)

    def create_record(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """
        Insert the record *before* the token is handed to the client.

        :raises ValueError: If a record with the same id already exists.
        """
        key = self._k(record.id)
        if self.r.exists(key):
            raise ValueError(f"Refresh token {record.id!r} already exists.")
        ttl = max(1, int(self.retention_seconds))
        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "token_hash": record.token_hash,
                "user_id": record.user_id,
                "token_family": record.token_family,
                "revoked": "1" if record.revoked else "0",
                "created_at": str(record.created_at.timestamp()),
            },
        )
        pipe.expire(key, ttl)
        pipe.sadd(self._kf(record.token_family), record.id)
        pipe.expire(self._kf(record.token_family), ttl)
        pipe.sadd(self._ku(record.user_id), record.id)
        pipe.expire(self._ku(record.user_id), ttl)
        pipe.execute()
        return record

    def update_where(self, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        """
        Conditionally assign ``values`` to the matching records.

        The candidate hashes are WATCHed, re-read and filtered, then written in
        a single MULTI block. A concurrent write to any of them aborts the
        transaction and the whole evaluation is retried, so for a given
        ``{"id": x, "revoked": False}`` filter exactly one caller sees 1.
        """
        check_filters(filters)
        check_values(values)
        if not values:
            return 0
        encoded = {k: ("1" if v else "0") for k, v in values.items()}

        while True:
            ids = self._candidate_ids(filters)
            keys = [self._k(i) for i in ids]
            if not keys:
                return 0
            try:
                with self.r.pipeline() as p:
                    p.watch(*keys)
                    hits: list[str] = []
                    for record_id, key in zip(ids, keys, strict=True):
                        h = p.hgetall(key)
                        if h and matches(self._from_hash(record_id, h), filters):
                            hits.append(key)
                    if not hits:
                        p.unwatch()
                        return 0
                    p.multi()
                    for key in hits:
                        p.hset(key, mapping=encoded)
                    p.execute()
                    return len(hits)
            except redis.WatchError:
                # Concurrent modification detected; retry loop
                continue

    def list_where(self, **filters: Any) -> list[RefreshTokenRecord]:
        check_filters(filters)
        found: list[RefreshTokenRecord] = []
        stale: list[str] = []
        for record_id in self._candidate_ids(filters):
            record = self.find_by_id(record_id)
            if record is None:
                stale.append(record_id)
            elif matches(record, filters):
                found.append(record)
        if stale and "token_family" in filters:
            # Underlying hash expired -> drop it from the family index
            self.r.srem(self._kf(str(filters["token_family"])), *stale)
        return sorted(found, key=lambda r: r.created_at)

    def count_where(self, **filters: Any) -> int:
        return len(self.list_where(**filters))
