# tenantapi/services/orders/service.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tenantapi.models.order import Order
from tenantapi.repositories.base import Page, Pagination
from tenantapi.services._shared.base import BaseService
from tenantapi.services._shared.errors import NotFoundError


class OrderService(BaseService):
    """Tenant-scoped orders. New orders belong to the caller and its organization."""

    def list(self, pagination: Pagination) -> Page[Order]:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            return uow.orders.paginate(pagination, filters={"organization_id": tenant})

    def get(self, order_id: str) -> Order:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            order = uow.orders.get_in_tenant(order_id, tenant)
            if order is None:
                raise NotFoundError("Order", order_id)
            return order

    def create(self, data: Mapping[str, Any]) -> Order:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            order = Order(
                total_amount=data["total_amount"],
                user_id=self.ctx.actor_id,
                organization_id=tenant,
            )
            return uow.orders.add(order)

    def update(self, order_id: str, data: Mapping[str, Any]) -> Order:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            order = uow.orders.get_in_tenant(order_id, tenant)
            if order is None:
                raise NotFoundError("Order", order_id)
            return uow.orders.assign_updates(order, data)

    def delete(self, order_id: str) -> None:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            order = uow.orders.get_in_tenant(order_id, tenant)
            if order is None:
                raise NotFoundError("Order", order_id)
            uow.orders.delete(order)
