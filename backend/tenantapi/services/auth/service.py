# tenantapi/services/auth/service.py
from __future__ import annotations

import hmac
import logging

from tenantapi.models.user import User
from tenantapi.repositories.user import UserRepository
from tenantapi.services._shared.base import BaseService
from tenantapi.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidOrExpiredRefreshTokenError,
    MissingTokenError,
    OrganizationNotFoundError,
    RefreshTokenRevokedError,
    UserNotFoundError,
)
from tenantapi.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
)
from tenantapi.services._shared.ports.user_lookup import UserIdentity, UserLookup
from tenantapi.services.auth.dto import (
    AuthResultOut,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserOut,
)
from tenantapi.services.auth.token_authority import (
    RefreshTokenClaims,
    TokenAuthority,
    TokenClaims,
)

log = logging.getLogger(__name__)


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        organization_id=user.organization_id,
    )


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Tokens are minted by a :class:`TokenAuthority`; refresh-token state lives
    in a :class:`RefreshTokenStore`. Every login or registration starts a new
    *token family*; each refresh rotates the presented token into a new one in
    the same family. Presenting an already-rotated token revokes the family.
    """

    def __init__(
        self,
        *,
        authority: TokenAuthority,
        refresh_store: RefreshTokenStore,
        users: UserLookup | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param authority: Issuer/verifier for access and refresh JWTs.
        :param refresh_store: Refresh-token persistence (conditional updates).
        :param users: Resolves token subjects; defaults to the SQL repository.
        """
        super().__init__()
        self.authority = authority
        self.refresh_store = refresh_store
        self.users: UserLookup = users or UserRepository()

    # ------------------------------------------------------------------ #
    # Register / Login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create a user inside an existing organization and start a token family.

        :raises OrganizationNotFoundError: If ``organization_name`` is unknown.
        :raises ConflictError: If the email is already registered.
        """
        with self.rw_uow() as uow:
            org = uow.organizations.get_by_name(dto.organization_name)
            if org is None:
                raise OrganizationNotFoundError(dto.organization_name)
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "email already registered")

            user = User(
                email=dto.email,
                first_name=dto.first_name,
                last_name=dto.last_name,
                organization_id=org.id,
            )
            user.password = dto.password
            uow.users.add(user)
            profile = _user_out(user)

        tokens = self._issue_pair(self._identity(profile), self.authority.new_token_family())
        log.info("auth.register", extra={"user_id": profile.id, "tenant_id": profile.organization_id})
        return AuthResultOut(user=profile, tokens=tokens)

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a token pair in a new family.

        :raises InvalidCredentialsError: On unknown email or wrong password.
        """
        with self.rw_uow() as uow:
            user = uow.users.authenticate(dto.email, dto.password)
            if user is None:
                raise InvalidCredentialsError()
            profile = _user_out(user)

        tokens = self._issue_pair(self._identity(profile), self.authority.new_token_family())
        return AuthResultOut(user=profile, tokens=tokens)

    def me(self, user_id: str) -> UserOut:
        """Return the profile of the authenticated user."""
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UserNotFoundError()
            return _user_out(user)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        The prior record is claimed with a conditional update
        (``revoked`` false → true); only the caller that flips it gets a new
        pair. A token that was already rotated, or that loses the claim to a
        concurrent presentation, revokes its whole family.

        The revocation covers the pair the winning request just received, so
        a client that submits the same refresh token twice in parallel ends
        up logged out and must authenticate again.

        :raises MissingTokenError: If no token was supplied.
        :raises InvalidOrExpiredRefreshTokenError: On verification failure or
            when no matching record exists.
        :raises UserNotFoundError: If the subject no longer exists.
        :raises RefreshTokenRevokedError: On replay of a rotated token.
        """
        token = self._require_token(dto.refresh_token)
        claims = self.authority.verify_refresh_token(token)

        identity = self.users.get_identity(claims.subject_id)
        if identity is None:
            raise UserNotFoundError()

        record = self._matching_record(token, claims)
        if record is None:
            raise InvalidOrExpiredRefreshTokenError()

        if record.revoked:
            self._revoke_family(record, reason="reuse")
            raise RefreshTokenRevokedError()

        claimed = self.refresh_store.update_where(
            {"id": record.id, "revoked": False}, {"revoked": True}
        )
        if claimed == 0:
            # Another presentation of the same token won the claim
            self._revoke_family(record, reason="concurrent_reuse")
            raise RefreshTokenRevokedError()

        return self._issue_pair(identity, record.token_family)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the family of the presented refresh token.

        Verification or lookup failures are logged and ignored so logout
        always succeeds once a token is supplied.

        :raises MissingTokenError: If no token was supplied.
        """
        token = self._require_token(dto.refresh_token)
        try:
            claims = self.authority.verify_refresh_token(token)
        except InvalidOrExpiredRefreshTokenError:
            log.info("auth.logout.unverifiable_token")
            return

        record = self._matching_record(token, claims)
        if record is None:
            log.info("auth.logout.unknown_token", extra={"user_id": claims.subject_id})
            return
        self._revoke_family(record, reason="logout")

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    @staticmethod
    def _require_token(token: str | None) -> str:
        if token is None or token == "":
            raise MissingTokenError()
        return token

    @staticmethod
    def _identity(profile: UserOut) -> UserIdentity:
        return UserIdentity(
            id=profile.id, email=profile.email, organization_id=profile.organization_id
        )

    def _matching_record(self, token: str, claims: RefreshTokenClaims) -> RefreshTokenRecord | None:
        """Return the stored record only if it belongs to exactly this token."""
        record = self.refresh_store.find_by_id(claims.token_id)
        if record is None:
            return None
        if not hmac.compare_digest(record.token_hash, self.authority.hash_token(token)):
            return None
        if record.user_id != claims.subject_id or record.token_family != claims.token_family:
            return None
        return record

    def _revoke_family(self, record: RefreshTokenRecord, *, reason: str) -> int:
        revoked = self.refresh_store.update_where(
            {"token_family": record.token_family}, {"revoked": True}
        )
        level = log.info if reason == "logout" else log.warning
        level(
            "auth.token_family_revoked reason=%s",
            reason,
            extra={"user_id": record.user_id, "token_family": record.token_family, "removed": revoked},
        )
        return revoked

    def _issue_pair(self, identity: UserIdentity, token_family: str) -> TokenPairOut:
        """Mint a pair and persist the refresh record before returning it."""
        claims = TokenClaims(
            subject_id=identity.id,
            email=identity.email,
            organization_id=identity.organization_id,
        )
        access = self.authority.issue_access_token(claims)
        issued = self.authority.issue_refresh_token(claims, token_family)
        self.refresh_store.create_record(
            RefreshTokenRecord(
                id=issued.token_id,
                token_hash=self.authority.hash_token(issued.token),
                user_id=identity.id,
                token_family=token_family,
            )
        )
        return TokenPairOut(access_token=access, refresh_token=issued.token)
