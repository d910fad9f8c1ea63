# tenantapi/services/users/service.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tenantapi.core.errors import Forbidden
from tenantapi.models.user import User
from tenantapi.repositories.base import Page, Pagination
from tenantapi.services._shared.base import BaseService
from tenantapi.services._shared.errors import ConflictError, NotFoundError


class UserService(BaseService):
    """
    Tenant-scoped user management.

    Reads and deletes only see users of the caller's organization; a profile
    can only be updated by its owner.
    """

    def list(self, pagination: Pagination) -> Page[User]:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            return uow.users.paginate(pagination, filters={"organization_id": tenant})

    def get(self, user_id: str) -> User:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            user = uow.users.find_one(id=user_id, organization_id=tenant)
            if user is None:
                raise NotFoundError("User", user_id)
            return user

    def update(self, user_id: str, data: Mapping[str, Any]) -> User:
        """
        Update the caller's own profile.

        :raises Forbidden: When ``user_id`` is not the caller.
        :raises ConflictError: When the new email is already registered.
        """
        tenant = self.require_tenant()
        if user_id != self.ctx.actor_id:
            raise Forbidden("You can only update your own profile")
        with self.rw_uow() as uow:
            user = uow.users.find_one(id=user_id, organization_id=tenant)
            if user is None:
                raise NotFoundError("User", user_id)
            email = data.get("email")
            if email and email.strip().lower() != user.email and uow.users.exists_by_email(email):
                raise ConflictError("User", "email already registered")
            return uow.users.assign_updates(user, data)

    def delete(self, user_id: str) -> None:
        tenant = self.require_tenant()
        with self.rw_uow() as uow:
            user = uow.users.find_one(id=user_id, organization_id=tenant)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.delete(user)
