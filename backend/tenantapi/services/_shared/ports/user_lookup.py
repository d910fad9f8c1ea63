"""Port used by the auth service to resolve token subjects to users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """
    Token-facing projection of a user.

    :ivar id: User id (token ``sub``).
    :ivar email: Normalized email.
    :ivar organization_id: Tenant id carried in access tokens.
    """

    id: str
    email: str
    organization_id: str


class UserLookup(Protocol):
    def get_identity(self, user_id: str) -> UserIdentity | None:
        """Return the identity for ``user_id`` or ``None`` when absent."""
