"""Organization (tenant) model."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tenantapi.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .order import Order
    from .user import User


class Organization(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Tenant boundary for users and orders.

    Fields
    ------
    name : str
        Display name, unique across the system. Used at registration time to
        attach a user to its tenant.
    industry : str | None
        Free-form sector label.
    date_founded : date | None
        Founding date.
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    industry: Mapped[str | None] = mapped_column(String(120), nullable=True)
    date_founded: Mapped[date | None] = mapped_column(Date, nullable=True)

    users: Mapped[list[User]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
    orders: Mapped[list[Order]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )

    __table_args__ = (UniqueConstraint("name", name="uq_organizations_name"),)

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Organization name is required.")
        return value.strip()
