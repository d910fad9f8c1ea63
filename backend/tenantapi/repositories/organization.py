"""Organization repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from tenantapi.models.organization import Organization
from tenantapi.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """Persistence-only repository for :class:`Organization`."""

    model = Organization

    def _sortable_fields(self):
        return {
            "name": Organization.name,
            "date_founded": Organization.date_founded,
            "created_at": Organization.created_at,
        }

    def _filterable_fields(self):
        return {"id": Organization.id, "name": Organization.name}

    def _updatable_fields(self):
        return {"name", "industry", "date_founded"}

    def get_by_name(self, name: str) -> Organization | None:
        """Fetch an organization by its exact (trimmed) name."""
        stmt = select(Organization).where(Organization.name == name.strip())
        return cast(Organization | None, self.session.execute(stmt).scalars().first())
