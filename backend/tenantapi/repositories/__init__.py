"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from tenantapi.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    paginate_select,
)
from tenantapi.repositories.order import OrderRepository
from tenantapi.repositories.organization import OrganizationRepository
from tenantapi.repositories.refresh_token import RefreshTokenRepository
from tenantapi.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "OrderRepository",
    "OrganizationRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
