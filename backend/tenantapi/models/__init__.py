from tenantapi.models.order import Order
from tenantapi.models.organization import Organization
from tenantapi.models.refresh_token import RefreshToken
from tenantapi.models.user import User

__all__ = ["Order", "Organization", "RefreshToken", "User"]
