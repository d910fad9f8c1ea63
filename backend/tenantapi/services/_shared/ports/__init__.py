"""
tenantapi.services._shared.ports
================================

*Ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenRecord` and the
    in-memory adapter used by unit tests and the ``memory`` backend.

- :mod:`user_lookup`:
    :class:`~.UserLookup` and :class:`~.UserIdentity`, used to resolve token
    subjects during rotation.

Concrete SQL and Redis adapters live under ``tenantapi.infra``.
"""

from __future__ import annotations

from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .user_lookup import UserIdentity, UserLookup

__all__ = [
    "InMemoryRefreshTokenStore",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "UserIdentity",
    "UserLookup",
]
