# tenantapi/services/organizations/service.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tenantapi.models.organization import Organization
from tenantapi.repositories.base import Page, Pagination
from tenantapi.services._shared.base import BaseService
from tenantapi.services._shared.errors import ConflictError, NotFoundError


class OrganizationService(BaseService):
    """CRUD over organizations. Every authenticated caller can read them all."""

    def list(self, pagination: Pagination) -> Page[Organization]:
        with self.rw_uow() as uow:
            return uow.organizations.paginate(pagination)

    def get(self, organization_id: str) -> Organization:
        with self.rw_uow() as uow:
            org = uow.organizations.get(organization_id)
            if org is None:
                raise NotFoundError("Organization", organization_id)
            return org

    def create(self, data: Mapping[str, Any]) -> Organization:
        """
        Create an organization.

        :raises ConflictError: If the name is already taken.
        """
        with self.rw_uow() as uow:
            if uow.organizations.get_by_name(data["name"]) is not None:
                raise ConflictError("Organization", "name already exists")
            org = Organization(
                name=data["name"],
                industry=data.get("industry"),
                date_founded=data.get("date_founded"),
            )
            return uow.organizations.add(org)

    def update(self, organization_id: str, data: Mapping[str, Any]) -> Organization:
        with self.rw_uow() as uow:
            org = uow.organizations.get(organization_id)
            if org is None:
                raise NotFoundError("Organization", organization_id)
            new_name = data.get("name")
            if new_name and new_name != org.name:
                clash = uow.organizations.get_by_name(new_name)
                if clash is not None and clash.id != org.id:
                    raise ConflictError("Organization", "name already exists")
            return uow.organizations.assign_updates(org, data)

    def delete(self, organization_id: str) -> None:
        with self.rw_uow() as uow:
            org = uow.organizations.get(organization_id)
            if org is None:
                raise NotFoundError("Organization", organization_id)
            uow.organizations.delete(org)
