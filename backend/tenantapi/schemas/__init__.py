"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, RefreshTokenSchema, RegisterSchema, TokenPairSchema
from .common import PaginationQuerySchema, SortQuerySchema, build_meta
from .order import OrderSchema, OrderWriteSchema
from .organization import OrganizationCreateSchema, OrganizationSchema, OrganizationUpdateSchema
from .user import UserSchema, UserUpdateSchema

__all__ = [
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "PaginationQuerySchema",
    "SortQuerySchema",
    "build_meta",
    "OrderSchema",
    "OrderWriteSchema",
    "OrganizationCreateSchema",
    "OrganizationSchema",
    "OrganizationUpdateSchema",
    "UserSchema",
    "UserUpdateSchema",
]
