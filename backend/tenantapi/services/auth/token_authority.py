# tenantapi/services/auth/token_authority.py
"""
Issue and verify the signed tokens used by the API.

Access tokens are short-lived and stateless: validity is signature plus
expiry. Refresh tokens are long-lived, signed with a *separate* secret and
carry a ``jti`` (token id) and a ``family`` claim; their lifecycle is tracked
by a :class:`~tenantapi.services._shared.ports.RefreshTokenStore`.

Access tokens use the claim layout expected by ``flask-jwt-extended``
(``sub``, ``type``, ``jti``, ``fresh``), so the same tokens pass the request
gate configured in :mod:`tenantapi.core.extensions`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from tenantapi.core.hashing import hash_token as _hash_token
from tenantapi.services._shared.errors import (
    InvalidOrExpiredRefreshTokenError,
    InvalidOrExpiredTokenError,
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------- Value objects -------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenAuthorityConfig:
    """
    Signing configuration.

    :param access_secret: Key for access tokens.
    :param refresh_secret: Key for refresh tokens; must differ from ``access_secret``.
    :param access_expires: Access token lifetime (1 hour by default).
    :param refresh_expires: Refresh token lifetime (30 days by default).
    :param algorithm: JWS algorithm.
    :param leeway: Clock-skew tolerance in seconds applied on verification.
    :param issuer: Optional ``iss`` claim, enforced on verification when set.
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta = timedelta(hours=1)
    refresh_expires: timedelta = timedelta(days=30)
    algorithm: str = "HS256"
    leeway: int = 0
    issuer: str | None = None

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both access and refresh secrets are required.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh tokens must use different secrets.")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenAuthorityConfig:
        """Build the config from a Flask ``app.config``-like mapping."""
        return cls(
            access_secret=config["JWT_SECRET_KEY"],
            refresh_secret=config["JWT_REFRESH_SECRET_KEY"],
            access_expires=timedelta(seconds=int(config.get("ACCESS_TOKEN_EXPIRES_SECONDS", 3600))),
            refresh_expires=timedelta(
                seconds=int(config.get("REFRESH_TOKEN_EXPIRES_SECONDS", 30 * 24 * 3600))
            ),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            leeway=int(config.get("JWT_DECODE_LEEWAY", 0)),
            issuer=config.get("JWT_ISSUER") or None,
        )


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Identity bundle embedded in every token."""

    subject_id: str
    email: str
    organization_id: str


@dataclass(frozen=True, slots=True)
class AccessTokenClaims:
    subject_id: str
    email: str
    organization_id: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class RefreshTokenClaims:
    """Verified refresh token content, including its rotation identifiers."""

    subject_id: str
    email: str
    organization_id: str
    token_id: str
    token_family: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class IssuedRefreshToken:
    """
    A freshly signed refresh token.

    :ivar token: Encoded JWT handed to the client.
    :ivar token_id: Its ``jti``; the id of the record the caller must persist.
    """

    token: str
    token_id: str


# ------------------------------ Authority ---------------------------------- #


class TokenAuthority:
    """
    Stateless issuer/verifier for access and refresh tokens.

    The authority never touches persistence; rotation and revocation are
    orchestrated by :class:`~tenantapi.services.auth.service.AuthService`.
    """

    def __init__(
        self, config: TokenAuthorityConfig, *, clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self.cfg = config
        self._clock = clock

    # ---- Helpers ----

    @staticmethod
    def new_token_family() -> str:
        """Return a fresh lineage id for a login or registration."""
        return str(uuid4())

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 digest stored instead of the raw refresh token."""
        return _hash_token(token)

    def _base_payload(self, claims: TokenClaims, token_type: str, lifetime: timedelta) -> dict[str, Any]:
        now = self._clock()
        issued_at = int(now.timestamp())
        payload: dict[str, Any] = {
            "sub": str(claims.subject_id),
            "email": claims.email,
            "organization_id": claims.organization_id,
            "type": token_type,
            "jti": str(uuid4()),
            "iat": issued_at,
            "nbf": issued_at,
            "exp": int((now + lifetime).timestamp()),
        }
        if self.cfg.issuer:
            payload["iss"] = self.cfg.issuer
        return payload

    def _decode(self, token: str, secret: str, expected_type: str) -> dict[str, Any]:
        """Verify signature, expiry, issuer and type; raise ``jwt.InvalidTokenError``."""
        payload = jwt.decode(
            token,
            secret,
            algorithms=[self.cfg.algorithm],
            leeway=self.cfg.leeway,
            issuer=self.cfg.issuer,
            options={"require": ["exp", "iat", "sub", "jti"]},
        )
        if payload.get("type") != expected_type:
            raise jwt.InvalidTokenError(f"Expected a {expected_type} token.")
        return payload

    @staticmethod
    def _ts(value: Any) -> datetime:
        return datetime.fromtimestamp(int(value), tz=UTC)

    # ---- Access tokens ----

    def issue_access_token(self, claims: TokenClaims) -> str:
        """
        Sign a short-lived access token.

        :param claims: Subject identity.
        :returns: Encoded JWT.
        """
        payload = self._base_payload(claims, ACCESS_TOKEN_TYPE, self.cfg.access_expires)
        payload["fresh"] = False
        return jwt.encode(payload, self.cfg.access_secret, algorithm=self.cfg.algorithm)

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """
        Verify an access token.

        :raises InvalidOrExpiredTokenError: On any signature, expiry, type or
            shape failure.
        """
        try:
            payload = self._decode(token, self.cfg.access_secret, ACCESS_TOKEN_TYPE)
            return AccessTokenClaims(
                subject_id=str(payload["sub"]),
                email=payload["email"],
                organization_id=payload["organization_id"],
                token_id=payload["jti"],
                issued_at=self._ts(payload["iat"]),
                expires_at=self._ts(payload["exp"]),
            )
        except (jwt.PyJWTError, KeyError, TypeError, ValueError) as exc:
            raise InvalidOrExpiredTokenError() from exc

    # ---- Refresh tokens ----

    def issue_refresh_token(self, claims: TokenClaims, token_family: str) -> IssuedRefreshToken:
        """
        Sign a long-lived refresh token inside ``token_family``.

        The token is not persisted here; the caller stores a record keyed by
        the returned ``token_id`` before handing the token out.
        """
        payload = self._base_payload(claims, REFRESH_TOKEN_TYPE, self.cfg.refresh_expires)
        payload["family"] = token_family
        token = jwt.encode(payload, self.cfg.refresh_secret, algorithm=self.cfg.algorithm)
        return IssuedRefreshToken(token=token, token_id=payload["jti"])

    def verify_refresh_token(self, token: str) -> RefreshTokenClaims:
        """
        Verify a refresh token.

        :raises InvalidOrExpiredRefreshTokenError: On any signature, expiry,
            type or shape failure (including non-JWT input).
        """
        try:
            payload = self._decode(token, self.cfg.refresh_secret, REFRESH_TOKEN_TYPE)
            return RefreshTokenClaims(
                subject_id=str(payload["sub"]),
                email=payload["email"],
                organization_id=payload["organization_id"],
                token_id=payload["jti"],
                token_family=payload["family"],
                issued_at=self._ts(payload["iat"]),
                expires_at=self._ts(payload["exp"]),
            )
        except (jwt.PyJWTError, KeyError, TypeError, ValueError) as exc:
            raise InvalidOrExpiredRefreshTokenError() from exc
