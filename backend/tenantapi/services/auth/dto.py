# tenantapi/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: User email (normalized by the model).
    :param password: Raw password (hashed by the model).
    :param organization_name: Existing organization to join.
    :param first_name: Optional first name.
    :param last_name: Optional last name.
    """

    email: str
    password: str
    organization_name: str
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT, ``None`` when the field was absent.
    """

    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Encoded refresh JWT, ``None`` when the field was absent.
    """

    refresh_token: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class UserOut:
    id: str
    email: str
    first_name: str | None
    last_name: str | None
    organization_id: str


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """Registration/login outcome: the user projection and a new token pair."""

    user: UserOut
    tokens: TokenPairOut
