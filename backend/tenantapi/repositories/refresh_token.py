"""Repository over the ``refresh_tokens`` table."""

from __future__ import annotations

from tenantapi.models.refresh_token import RefreshToken
from tenantapi.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Whitelists the fields the rotation protocol filters and flips."""

    model = RefreshToken

    def _sortable_fields(self):
        return {"created_at": RefreshToken.created_at}

    def _filterable_fields(self):
        return {
            "id": RefreshToken.id,
            "user_id": RefreshToken.user_id,
            "token_family": RefreshToken.token_family,
            "revoked": RefreshToken.revoked,
        }

    def _updatable_fields(self):
        return {"revoked"}
