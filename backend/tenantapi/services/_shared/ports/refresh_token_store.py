from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Protocol

#: Fields accepted by ``*_where`` filters across every adapter.
FILTERABLE_FIELDS = frozenset({"id", "user_id", "token_family", "revoked"})
#: Fields ``update_where`` may assign.
UPDATABLE_FIELDS = frozenset({"revoked"})


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Persisted state of one issued refresh token.

    :ivar id: Token id, identical to the ``jti`` claim of the signed token.
    :ivar token_hash: SHA-256 hex digest of the signed token.
    :ivar user_id: Owner user id.
    :ivar token_family: Lineage shared by all tokens rotated from one login.
    :ivar revoked: Whether the token can no longer be exchanged.
    :ivar created_at: Issuance time (UTC).
    """

    id: str
    token_hash: str
    user_id: str
    token_family: str
    revoked: bool = False
    created_at: datetime = field(default_factory=_utcnow)


def check_filters(filters: Mapping[str, Any]) -> None:
    """Reject empty or non-whitelisted filter mappings.

    :raises ValueError: When ``filters`` is empty or names an unknown field.
    """
    if not filters:
        raise ValueError("At least one filter is required.")
    unknown = set(filters) - FILTERABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown or non-filterable fields: {sorted(unknown)}")


def check_values(values: Mapping[str, Any]) -> None:
    """Reject non-whitelisted update values.

    :raises ValueError: When ``values`` names a field other than ``revoked``.
    """
    unknown = set(values) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown or non-updatable fields: {sorted(unknown)}")


def matches(record: RefreshTokenRecord, filters: Mapping[str, Any]) -> bool:
    return all(getattr(record, key) == value for key, value in filters.items())


class RefreshTokenStore(Protocol):
    """
    Persistence port for refresh-token records.

    ``update_where`` MUST be atomic per call: the filter evaluation and the
    assignment happen as one step, which makes it usable as a
    compare-and-swap (``{"id": x, "revoked": False}`` → ``{"revoked": True}``
    returns 1 for exactly one caller).
    """

    def find_by_id(self, record_id: str) -> RefreshTokenRecord | None:
        """Return the record with ``record_id`` or ``None``."""

    def create_record(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """Persist a brand-new record and return it."""

    def update_where(self, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        """Assign ``values`` to every record matching ``filters``.

        :returns: Number of records changed.
        """

    def count_where(self, **filters: Any) -> int:
        """Count records matching ``filters``."""

    def list_where(self, **filters: Any) -> list[RefreshTokenRecord]:
        """Return records matching ``filters`` ordered by creation time."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh-token store.

    .. note::
       A single lock serializes every call, so ``update_where`` is atomic
       across threads.
    """

    def __init__(self) -> None:
        self._records: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def find_by_id(self, record_id: str) -> RefreshTokenRecord | None:
        with self._lock:
            return self._records.get(record_id)

    def create_record(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"Refresh token {record.id!r} already exists.")
            self._records[record.id] = record
            return record

    def update_where(self, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        check_filters(filters)
        check_values(values)
        changed = 0
        with self._lock:
            for key, record in list(self._records.items()):
                if matches(record, filters):
                    self._records[key] = replace(record, **values)
                    changed += 1
        return changed

    def count_where(self, **filters: Any) -> int:
        return len(self.list_where(**filters))

    def list_where(self, **filters: Any) -> list[RefreshTokenRecord]:
        if filters:
            check_filters(filters)
        with self._lock:
            found = [r for r in self._records.values() if matches(r, filters)]
        return sorted(found, key=lambda r: r.created_at)
