"""Order repository with tenant-scoped lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from tenantapi.models.order import Order
from tenantapi.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Persistence-only repository for :class:`Order`."""

    model = Order

    def _sortable_fields(self):
        return {"total_amount": Order.total_amount, "created_at": Order.created_at}

    def _filterable_fields(self):
        return {
            "id": Order.id,
            "user_id": Order.user_id,
            "organization_id": Order.organization_id,
        }

    def _updatable_fields(self):
        return {"total_amount"}

    def get_in_tenant(self, order_id: str, organization_id: str) -> Order | None:
        """Fetch an order only when it belongs to ``organization_id``."""
        stmt = select(Order).where(
            Order.id == order_id, Order.organization_id == organization_id
        )
        return cast(Order | None, self.session.execute(stmt).scalars().first())
