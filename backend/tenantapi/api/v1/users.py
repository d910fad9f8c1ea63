"""Tenant-scoped user endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from tenantapi.api.caching import cached_response, invalidates
from tenantapi.api.deps import json_response, parse_pagination, require_auth, service_context, timing
from tenantapi.schemas import UserSchema, UserUpdateSchema, build_meta
from tenantapi.services.users.service import UserService

bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_update_schema = UserUpdateSchema()


@bp.get("")
@require_auth
@cached_response
@timing
def list_users():
    """Return the caller's organization members, paginated."""

    pagination = parse_pagination()
    page = UserService(ctx=service_context()).list(pagination)
    meta = build_meta(total=page.total, page=page.page, limit=page.limit)
    return json_response({"data": user_list_schema.dump(page.items), "meta": meta})


@bp.get("/<user_id>")
@require_auth
@cached_response
@timing
def get_user(user_id: str):
    user = UserService(ctx=service_context()).get(user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.put("/<user_id>")
@require_auth
@invalidates("users")
@timing
def update_user(user_id: str):
    """Update the caller's own profile."""

    payload = user_update_schema.load(request.get_json(silent=True) or {})
    user = UserService(ctx=service_context()).update(user_id, payload)
    return json_response({"message": "User updated successfully", "data": user_schema.dump(user)})


@bp.delete("/<user_id>")
@require_auth
@invalidates("users", "orders")
@timing
def delete_user(user_id: str):
    UserService(ctx=service_context()).delete(user_id)
    return json_response({"message": "User deleted successfully"})
