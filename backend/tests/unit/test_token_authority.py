"""Unit tests for :class:`TokenAuthority`."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from tenantapi.services._shared.errors import (
    InvalidOrExpiredRefreshTokenError,
    InvalidOrExpiredTokenError,
)
from tenantapi.services.auth.token_authority import (
    TokenAuthority,
    TokenAuthorityConfig,
    TokenClaims,
)

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdef"

CLAIMS = TokenClaims(subject_id="user-1", email="a@example.com", organization_id="org-1")


@pytest.fixture()
def authority() -> TokenAuthority:
    return TokenAuthority(TokenAuthorityConfig(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET))


def test_config_requires_distinct_secrets():
    with pytest.raises(ValueError):
        TokenAuthorityConfig(access_secret="same", refresh_secret="same")
    with pytest.raises(ValueError):
        TokenAuthorityConfig(access_secret="", refresh_secret="x")


def test_config_from_flask_mapping():
    cfg = TokenAuthorityConfig.from_mapping(
        {
            "JWT_SECRET_KEY": ACCESS_SECRET,
            "JWT_REFRESH_SECRET_KEY": REFRESH_SECRET,
            "ACCESS_TOKEN_EXPIRES_SECONDS": 120,
            "REFRESH_TOKEN_EXPIRES_SECONDS": 3600,
            "JWT_ISSUER": "tenantapi",
        }
    )
    assert cfg.access_expires == timedelta(seconds=120)
    assert cfg.refresh_expires == timedelta(hours=1)
    assert cfg.issuer == "tenantapi"


def test_access_token_round_trip(authority):
    token = authority.issue_access_token(CLAIMS)
    claims = authority.verify_access_token(token)
    assert claims.subject_id == "user-1"
    assert claims.organization_id == "org-1"
    assert claims.expires_at - claims.issued_at == timedelta(hours=1)

    raw = jwt.decode(token, ACCESS_SECRET, algorithms=["HS256"])
    assert raw["type"] == "access"
    assert raw["fresh"] is False
    assert raw["sub"] == "user-1"


def test_refresh_token_carries_id_and_family(authority):
    issued = authority.issue_refresh_token(CLAIMS, "family-1")
    claims = authority.verify_refresh_token(issued.token)
    assert claims.token_id == issued.token_id
    assert claims.token_family == "family-1"
    assert claims.expires_at - claims.issued_at == timedelta(days=30)


def test_each_refresh_token_gets_a_unique_id(authority):
    first = authority.issue_refresh_token(CLAIMS, "f")
    second = authority.issue_refresh_token(CLAIMS, "f")
    assert first.token_id != second.token_id
    assert first.token != second.token


def test_token_kinds_are_not_interchangeable(authority):
    access = authority.issue_access_token(CLAIMS)
    refresh = authority.issue_refresh_token(CLAIMS, "f").token
    with pytest.raises(InvalidOrExpiredRefreshTokenError):
        authority.verify_refresh_token(access)
    with pytest.raises(InvalidOrExpiredTokenError):
        authority.verify_access_token(refresh)


def test_type_claim_is_checked_even_with_the_right_secret(authority):
    forged = jwt.encode(
        {"sub": "user-1", "jti": "x", "iat": 1, "exp": 9999999999, "type": "access"},
        REFRESH_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidOrExpiredRefreshTokenError):
        authority.verify_refresh_token(forged)


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens_are_rejected(authority, garbage):
    with pytest.raises(InvalidOrExpiredRefreshTokenError):
        authority.verify_refresh_token(garbage)
    with pytest.raises(InvalidOrExpiredTokenError):
        authority.verify_access_token(garbage)


def test_access_token_expires_after_one_hour(authority):
    with freeze_time("2024-01-01 12:00:00"):
        token = authority.issue_access_token(CLAIMS)
    with freeze_time("2024-01-01 12:59:59"):
        assert authority.verify_access_token(token).subject_id == "user-1"
    with freeze_time("2024-01-01 13:00:01"):
        with pytest.raises(InvalidOrExpiredTokenError):
            authority.verify_access_token(token)


def test_refresh_token_expires_after_thirty_days(authority):
    with freeze_time("2024-01-01"):
        token = authority.issue_refresh_token(CLAIMS, "f").token
    with freeze_time("2024-01-31 00:00:01"):
        with pytest.raises(InvalidOrExpiredRefreshTokenError):
            authority.verify_refresh_token(token)


def test_leeway_tolerates_small_clock_skew():
    authority = TokenAuthority(
        TokenAuthorityConfig(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET, leeway=30)
    )
    with freeze_time("2024-01-01 12:00:00"):
        token = authority.issue_access_token(CLAIMS)
    with freeze_time("2024-01-01 13:00:20"):
        assert authority.verify_access_token(token).subject_id == "user-1"


def test_issuer_is_enforced_when_configured():
    issuing = TokenAuthority(
        TokenAuthorityConfig(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET, issuer="a")
    )
    verifying = TokenAuthority(
        TokenAuthorityConfig(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET, issuer="b")
    )
    token = issuing.issue_access_token(CLAIMS)
    assert issuing.verify_access_token(token).subject_id == "user-1"
    with pytest.raises(InvalidOrExpiredTokenError):
        verifying.verify_access_token(token)


def test_injected_clock_drives_issue_time():
    fixed = datetime(2030, 5, 1, tzinfo=UTC)
    authority = TokenAuthority(
        TokenAuthorityConfig(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET),
        clock=lambda: fixed,
    )
    token = authority.issue_access_token(CLAIMS)
    raw = jwt.decode(token, options={"verify_signature": False})
    assert raw["iat"] == int(fixed.timestamp())


def test_hash_token_matches_sha256(authority):
    assert len(authority.hash_token("t")) == 64
    assert authority.hash_token("t") != authority.hash_token("u")
