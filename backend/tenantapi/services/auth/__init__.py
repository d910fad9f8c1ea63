from tenantapi.services.auth.service import AuthService
from tenantapi.services.auth.token_authority import TokenAuthority, TokenAuthorityConfig

__all__ = ["AuthService", "TokenAuthority", "TokenAuthorityConfig"]
