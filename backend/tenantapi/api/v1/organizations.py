"""Organization endpoints. Organizations are visible to every tenant."""

from __future__ import annotations

from flask import Blueprint, request

from tenantapi.api.caching import cached_response, invalidates
from tenantapi.api.deps import json_response, parse_pagination, require_auth, timing
from tenantapi.schemas import (
    OrganizationCreateSchema,
    OrganizationSchema,
    OrganizationUpdateSchema,
    build_meta,
)
from tenantapi.services.organizations.service import OrganizationService

bp = Blueprint("organizations", __name__)

organization_schema = OrganizationSchema()
organization_list_schema = OrganizationSchema(many=True)
organization_create_schema = OrganizationCreateSchema()
organization_update_schema = OrganizationUpdateSchema()


@bp.get("")
@require_auth
@cached_response
@timing
def list_organizations():
    pagination = parse_pagination()
    page = OrganizationService().list(pagination)
    meta = build_meta(total=page.total, page=page.page, limit=page.limit)
    return json_response({"data": organization_list_schema.dump(page.items), "meta": meta})


@bp.get("/<organization_id>")
@require_auth
@cached_response
@timing
def get_organization(organization_id: str):
    org = OrganizationService().get(organization_id)
    return json_response({"data": organization_schema.dump(org)})


@bp.post("")
@require_auth
@invalidates("organizations", scope="global")
@timing
def create_organization():
    payload = organization_create_schema.load(request.get_json(silent=True) or {})
    org = OrganizationService().create(payload)
    return json_response({"data": organization_schema.dump(org)}, status=201)


@bp.put("/<organization_id>")
@require_auth
@invalidates("organizations", scope="global")
@timing
def update_organization(organization_id: str):
    payload = organization_update_schema.load(request.get_json(silent=True) or {})
    org = OrganizationService().update(organization_id, payload)
    return json_response({"data": organization_schema.dump(org)})


@bp.delete("/<organization_id>")
@require_auth
@invalidates("organizations", "users", "orders", scope="global")
@timing
def delete_organization(organization_id: str):
    """Delete an organization together with its users and orders."""

    OrganizationService().delete(organization_id)
    return json_response({"message": "Organization deleted successfully"})
