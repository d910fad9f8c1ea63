"""Order model owned by a user inside an organization."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenantapi.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .organization import Organization
    from .user import User


class Order(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Purchase record.

    ``organization_id`` is denormalized from the owning user so tenant-scoped
    listings never need a join.
    """

    __tablename__ = "orders"

    total_amount: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )

    user: Mapped[User] = relationship(back_populates="orders")
    organization: Mapped[Organization] = relationship(back_populates="orders")

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="total_amount_non_negative"),
        Index("ix_orders_organization_id", "organization_id"),
        Index("ix_orders_user_id", "user_id"),
    )
