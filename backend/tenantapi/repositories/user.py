"""User repository for persistence and authentication utilities."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from tenantapi.models.user import User
from tenantapi.repositories.base import BaseRepository
from tenantapi.services._shared.ports.user_lookup import UserIdentity


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository focuses on safe lookup, filtering, and password checks.
    It never handles tokens.
    """

    model = User

    def _sortable_fields(self):
        return {
            "email": User.email,
            "created_at": User.created_at,
            "last_name": User.last_name,
        }

    def _filterable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "organization_id": User.organization_id,
        }

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not including password)."""
        return {"email", "first_name", "last_name"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate a user by email and password.

        :returns: Authenticated user or ``None`` when credentials fail.
        :rtype: User | None
        """
        user = self.get_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user

    def get_identity(self, user_id: str) -> UserIdentity | None:
        """Return the token-facing projection of a user, or ``None``."""
        user = self.get(user_id)
        if user is None:
            return None
        return UserIdentity(
            id=user.id, email=user.email, organization_id=user.organization_id
        )
