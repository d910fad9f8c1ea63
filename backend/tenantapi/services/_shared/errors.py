"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or
HTTP. The translation to RFC 7807 responses happens in
``tenantapi.services._shared.base.translate_service_error``, registered as an
error handler by ``tenantapi.core.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :cvar code: Stable machine-readable identifier surfaced to clients.
    """

    code: ClassVar[str] = "bad_request"


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str
    """

    entity: str
    key: str

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class OrganizationNotFoundError(ServiceError):
    """Registration referenced an organization name that does not exist."""

    code = "organization_not_found"

    def __init__(self, name: str) -> None:
        super().__init__(f"Organization '{name}' does not exist")
        self.name = name


# --------------------------------------------------------------------------- #
# Authentication failures
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base for failures that map to ``401 Unauthorized``."""

    code = "unauthorized"
    default_message: ClassVar[str] = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthenticationError):
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidOrExpiredTokenError(AuthenticationError):
    code = "invalid_or_expired_token"
    default_message = "Invalid or expired token"


class InvalidOrExpiredRefreshTokenError(AuthenticationError):
    code = "invalid_or_expired_refresh_token"
    default_message = "Invalid or expired refresh token"


class RefreshTokenRevokedError(AuthenticationError):
    """The presented refresh token was already used; its family is now revoked."""

    code = "refresh_token_revoked"
    default_message = "Refresh token has been revoked. Please log in again."


class UserNotFoundError(AuthenticationError):
    code = "user_not_found"
    default_message = "User not found"


class MissingTokenError(ServiceError):
    """The request did not carry the token field at all."""

    code = "missing_token"

    def __init__(self, message: str = "Refresh token is required") -> None:
        super().__init__(message)
