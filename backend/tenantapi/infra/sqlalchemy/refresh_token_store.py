"""Relational adapter for :class:`RefreshTokenStore` (system of record)."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.orm import Session

from tenantapi.core.extensions import db
from tenantapi.models.refresh_token import RefreshToken
from tenantapi.repositories.refresh_token import RefreshTokenRepository
from tenantapi.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
    check_filters,
    check_values,
)


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        token_hash=row.token_hash,
        user_id=row.user_id,
        token_family=row.token_family,
        revoked=bool(row.revoked),
        created_at=row.created_at,
    )


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Store refresh-token records in the ``refresh_tokens`` table.

    Each call runs and commits its own statement, so a conditional
    ``update_where`` is decided by the database (``UPDATE ... WHERE`` plus
    ``rowcount``) and is visible to concurrent requests immediately.

    :param session_factory: Returns the session to use; defaults to the
        Flask-scoped ``db.session``.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory or (lambda: db.session)

    def _repo(self) -> RefreshTokenRepository:
        return RefreshTokenRepository(session=self._session_factory())

    def find_by_id(self, record_id: str) -> RefreshTokenRecord | None:
        row = self._repo().get(record_id)
        return _to_record(row) if row is not None else None

    def create_record(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        repo = self._repo()
        try:
            row = repo.add(
                RefreshToken(
                    id=record.id,
                    token_hash=record.token_hash,
                    user_id=record.user_id,
                    token_family=record.token_family,
                    revoked=record.revoked,
                    created_at=record.created_at,
                )
            )
            repo.session.commit()
        except Exception:
            repo.session.rollback()
            raise
        return _to_record(row)

    def update_where(self, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        check_filters(filters)
        check_values(values)
        repo = self._repo()
        try:
            changed = repo.update_where(filters, values)
            repo.session.commit()
        except Exception:
            repo.session.rollback()
            raise
        # Bulk UPDATE bypasses the identity map; drop stale copies.
        repo.session.expire_all()
        return changed

    def count_where(self, **filters: Any) -> int:
        if filters:
            check_filters(filters)
        return self._repo().count_where(**filters)

    def list_where(self, **filters: Any) -> list[RefreshTokenRecord]:
        if filters:
            check_filters(filters)
        rows = self._repo().list(filters=filters, sort=["created_at"])
        return [_to_record(row) for row in rows]
