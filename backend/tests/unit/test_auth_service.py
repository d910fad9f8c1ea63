"""Unit tests for :class:`AuthService` rotation and revocation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

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
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
)
from tenantapi.services._shared.ports.user_lookup import UserIdentity
from tenantapi.services.auth import AuthService, TokenAuthority, TokenAuthorityConfig
from tenantapi.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn
from tenantapi.services.auth.token_authority import TokenClaims
from tests.factories import OrganizationFactory, UserFactory

CONFIG = TokenAuthorityConfig(
    access_secret="unit-access-secret-0123456789abcdef",
    refresh_secret="unit-refresh-secret-0123456789abcdef",
)


class FakeUsers:
    """In-memory :class:`UserLookup`."""

    def __init__(self, *identities: UserIdentity) -> None:
        self.identities = {i.id: i for i in identities}

    def get_identity(self, user_id: str) -> UserIdentity | None:
        return self.identities.get(user_id)


class ClaimLosingStore(InMemoryRefreshTokenStore):
    """Simulates a concurrent request revoking the record between read and claim."""

    def update_where(self, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        if "id" in filters:
            super().update_where({"id": filters["id"]}, {"revoked": True})
            return 0
        return super().update_where(filters, values)


ALICE = UserIdentity(id="user-1", email="alice@example.com", organization_id="org-1")


@pytest.fixture()
def authority() -> TokenAuthority:
    return TokenAuthority(CONFIG)


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def service(authority, store) -> AuthService:
    """AuthService on in-memory doubles; no database involved."""
    return AuthService(authority=authority, refresh_store=store, users=FakeUsers(ALICE))


def _pair(service: AuthService, identity: UserIdentity = ALICE):
    return service._issue_pair(identity, service.authority.new_token_family())


# ------------------------------ Rotation ---------------------------------- #


def test_issued_pair_persists_a_live_record(service, store, authority):
    pair = _pair(service)
    claims = authority.verify_refresh_token(pair.refresh_token)
    record = store.find_by_id(claims.token_id)
    assert record is not None
    assert record.revoked is False
    assert record.user_id == ALICE.id
    assert record.token_hash == authority.hash_token(pair.refresh_token)


def test_refresh_rotates_within_the_family(service, store, authority):
    first = _pair(service)
    second = service.refresh(RefreshIn(refresh_token=first.refresh_token))

    old = authority.verify_refresh_token(first.refresh_token)
    new = authority.verify_refresh_token(second.refresh_token)
    assert new.token_family == old.token_family
    assert new.token_id != old.token_id
    assert store.find_by_id(old.token_id).revoked is True
    assert store.find_by_id(new.token_id).revoked is False
    assert authority.verify_access_token(second.access_token).organization_id == "org-1"


def test_replaying_a_rotated_token_revokes_the_family(service, store, authority):
    first = _pair(service)
    second = service.refresh(RefreshIn(refresh_token=first.refresh_token))

    with pytest.raises(RefreshTokenRevokedError):
        service.refresh(RefreshIn(refresh_token=first.refresh_token))

    family = authority.verify_refresh_token(first.refresh_token).token_family
    assert store.count_where(token_family=family, revoked=False) == 0
    # the legitimate successor is dead too
    with pytest.raises(RefreshTokenRevokedError):
        service.refresh(RefreshIn(refresh_token=second.refresh_token))


def test_replay_leaves_other_families_alone(service, store, authority):
    stolen = _pair(service)
    other = _pair(service)
    service.refresh(RefreshIn(refresh_token=stolen.refresh_token))
    with pytest.raises(RefreshTokenRevokedError):
        service.refresh(RefreshIn(refresh_token=stolen.refresh_token))

    assert service.refresh(RefreshIn(refresh_token=other.refresh_token)).refresh_token


def test_losing_the_claim_is_treated_as_reuse(authority):
    store = ClaimLosingStore()
    service = AuthService(authority=authority, refresh_store=store, users=FakeUsers(ALICE))
    pair = _pair(service)

    with pytest.raises(RefreshTokenRevokedError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))

    family = authority.verify_refresh_token(pair.refresh_token).token_family
    assert store.count_where(token_family=family, revoked=False) == 0
    assert store.count_where(token_family=family) == 1


class StaleReadStore(InMemoryRefreshTokenStore):
    """Serves pinned snapshots from ``find_by_id``, as a request that read early would."""

    def __init__(self) -> None:
        super().__init__()
        self.snapshots: dict[str, RefreshTokenRecord] = {}

    def find_by_id(self, record_id: str) -> RefreshTokenRecord | None:
        return self.snapshots.get(record_id) or super().find_by_id(record_id)


def test_losing_a_race_also_revokes_the_winners_pair(authority):
    store = StaleReadStore()
    service = AuthService(authority=authority, refresh_store=store, users=FakeUsers(ALICE))
    pair = _pair(service)
    token_id = authority.verify_refresh_token(pair.refresh_token).token_id
    store.snapshots[token_id] = store.find_by_id(token_id)

    winner = service.refresh(RefreshIn(refresh_token=pair.refresh_token))
    with pytest.raises(RefreshTokenRevokedError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))

    with pytest.raises(RefreshTokenRevokedError):
        service.refresh(RefreshIn(refresh_token=winner.refresh_token))


@pytest.mark.parametrize("value", [None, ""])
def test_refresh_requires_a_token(service, value):
    with pytest.raises(MissingTokenError):
        service.refresh(RefreshIn(refresh_token=value))


def test_refresh_rejects_garbage(service):
    with pytest.raises(InvalidOrExpiredRefreshTokenError):
        service.refresh(RefreshIn(refresh_token="garbage"))


def test_refresh_rejects_signed_token_without_record(service, authority):
    claims = TokenClaims(subject_id=ALICE.id, email=ALICE.email, organization_id=ALICE.organization_id)
    issued = authority.issue_refresh_token(claims, "family-x")
    with pytest.raises(InvalidOrExpiredRefreshTokenError):
        service.refresh(RefreshIn(refresh_token=issued.token))


def test_refresh_rejects_record_with_other_hash(service, store, authority):
    claims = TokenClaims(subject_id=ALICE.id, email=ALICE.email, organization_id=ALICE.organization_id)
    issued = authority.issue_refresh_token(claims, "family-x")
    store.create_record(
        RefreshTokenRecord(
            id=issued.token_id, token_hash="0" * 64, user_id=ALICE.id, token_family="family-x"
        )
    )
    with pytest.raises(InvalidOrExpiredRefreshTokenError):
        service.refresh(RefreshIn(refresh_token=issued.token))
    assert store.find_by_id(issued.token_id).revoked is False


def test_refresh_for_deleted_user(authority, store):
    issuing = AuthService(authority=authority, refresh_store=store, users=FakeUsers(ALICE))
    pair = _pair(issuing)
    service = AuthService(authority=authority, refresh_store=store, users=FakeUsers())
    with pytest.raises(UserNotFoundError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


# ------------------------------- Logout ----------------------------------- #


def test_logout_revokes_the_whole_family(service, store, authority):
    first = _pair(service)
    second = service.refresh(RefreshIn(refresh_token=first.refresh_token))

    service.logout(LogoutIn(refresh_token=second.refresh_token))

    family = authority.verify_refresh_token(first.refresh_token).token_family
    assert store.count_where(token_family=family, revoked=False) == 0
    with pytest.raises(RefreshTokenRevokedError):
        service.refresh(RefreshIn(refresh_token=second.refresh_token))


def test_logout_is_idempotent_and_ignores_bad_tokens(service):
    pair = _pair(service)
    service.logout(LogoutIn(refresh_token=pair.refresh_token))
    service.logout(LogoutIn(refresh_token=pair.refresh_token))
    service.logout(LogoutIn(refresh_token="not-a-token"))


def test_logout_requires_a_token(service):
    with pytest.raises(MissingTokenError):
        service.logout(LogoutIn(refresh_token=None))


# --------------------------- Register / Login ------------------------------ #


def test_register_joins_existing_organization(app, authority, store):
    org = OrganizationFactory(name="Acme")
    service = AuthService(authority=authority, refresh_store=store)

    result = service.register(
        RegisterIn(email="New@Example.com", password="longenough", organization_name="Acme")
    )

    assert result.user.email == "new@example.com"
    assert result.user.organization_id == org.id
    claims = authority.verify_access_token(result.tokens.access_token)
    assert claims.subject_id == result.user.id
    assert store.count_where(user_id=result.user.id) == 1


def test_register_unknown_organization(app, authority, store):
    service = AuthService(authority=authority, refresh_store=store)
    with pytest.raises(OrganizationNotFoundError):
        service.register(RegisterIn(email="x@example.com", password="longenough", organization_name="Nope"))


def test_register_duplicate_email(app, authority, store):
    user = UserFactory()
    service = AuthService(authority=authority, refresh_store=store)
    with pytest.raises(ConflictError):
        service.register(
            RegisterIn(email=user.email, password="longenough", organization_name=user.organization.name)
        )


def test_login_starts_a_new_family_each_time(app, authority, store):
    user = UserFactory()
    service = AuthService(authority=authority, refresh_store=store)

    first = service.login(LoginIn(email=user.email, password="Passw0rd!"))
    second = service.login(LoginIn(email=user.email, password="Passw0rd!"))

    fam_1 = authority.verify_refresh_token(first.tokens.refresh_token).token_family
    fam_2 = authority.verify_refresh_token(second.tokens.refresh_token).token_family
    assert fam_1 != fam_2


def test_login_rejects_wrong_password(app, authority, store):
    user = UserFactory()
    service = AuthService(authority=authority, refresh_store=store)
    with pytest.raises(InvalidCredentialsError):
        service.login(LoginIn(email=user.email, password="wrong"))
    with pytest.raises(InvalidCredentialsError):
        service.login(LoginIn(email="ghost@example.com", password="whatever"))
