"""Persisted refresh-token records (one row per issued refresh token)."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from tenantapi.core.extensions import db

from .base import ReprMixin


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshToken(ReprMixin, db.Model):
    """
    Rotation state for a single refresh token.

    Fields
    ------
    id : str
        Token id, equal to the ``jti`` claim of the signed token.
    token_hash : str
        SHA-256 hex digest of the signed token. The raw token is never stored.
    user_id : str
        Owner of the token.
    token_family : str
        Lineage shared by every token rotated from the same login.
    revoked : bool
        Set once the token has been rotated, logged out or its family was
        revoked after a replay.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_family: Mapped[str] = mapped_column(String(36), nullable=False)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("ix_refresh_tokens_token_family", "token_family"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )
