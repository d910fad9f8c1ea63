"""Tenant-scoped order endpoints, rate limited per organization."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from tenantapi.api.caching import cached_response, invalidates
from tenantapi.api.deps import (
    json_response,
    parse_pagination,
    require_auth,
    service_context,
    tenant_rate_limit_key,
    timing,
)
from tenantapi.core.extensions import limiter
from tenantapi.schemas import OrderSchema, OrderWriteSchema, build_meta
from tenantapi.services.orders.service import OrderService

bp = Blueprint("orders", __name__)

order_schema = OrderSchema()
order_list_schema = OrderSchema(many=True)
order_write_schema = OrderWriteSchema()


def _organization_rate_limit() -> str:
    return str(current_app.config.get("ORGANIZATION_RATE_LIMIT", "30 per minute"))


limiter.limit(_organization_rate_limit, key_func=tenant_rate_limit_key)(bp)


@bp.get("")
@require_auth
@cached_response
@timing
def list_orders():
    pagination = parse_pagination()
    page = OrderService(ctx=service_context()).list(pagination)
    meta = build_meta(total=page.total, page=page.page, limit=page.limit)
    return json_response({"data": order_list_schema.dump(page.items), "meta": meta})


@bp.get("/<order_id>")
@require_auth
@cached_response
@timing
def get_order(order_id: str):
    order = OrderService(ctx=service_context()).get(order_id)
    return json_response({"data": order_schema.dump(order)})


@bp.post("")
@require_auth
@invalidates("orders")
@timing
def create_order():
    payload = order_write_schema.load(request.get_json(silent=True) or {})
    order = OrderService(ctx=service_context()).create(payload)
    return json_response(
        {"message": "Order has been created", "data": order_schema.dump(order)}, status=201
    )


@bp.put("/<order_id>")
@require_auth
@invalidates("orders")
@timing
def update_order(order_id: str):
    payload = order_write_schema.load(request.get_json(silent=True) or {})
    order = OrderService(ctx=service_context()).update(order_id, payload)
    return json_response({"message": "Order updated successfully", "data": order_schema.dump(order)})


@bp.delete("/<order_id>")
@require_auth
@invalidates("orders")
@timing
def delete_order(order_id: str):
    OrderService(ctx=service_context()).delete(order_id)
    return json_response({"message": "Order deleted successfully"})
