"""Contract tests shared by every :class:`RefreshTokenStore` adapter.

The same scenarios run against the in-memory store, the SQLAlchemy store
(in-memory SQLite) and the Redis store (``fakeredis``).
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from tenantapi.infra.redis.refresh_token_store import RedisRefreshTokenStore
from tenantapi.infra.sqlalchemy.refresh_token_store import SQLAlchemyRefreshTokenStore
from tenantapi.services._shared.ports.refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
)
from tests.factories import SQLAlchemySession, UserFactory


@pytest.fixture(params=["memory", "sqlalchemy", "redis"])
def store(request):
    """Yield one adapter per parametrized backend."""
    if request.param == "memory":
        yield InMemoryRefreshTokenStore()
        return
    if request.param == "redis":
        r = fakeredis.FakeRedis()
        r.flushall()
        yield RedisRefreshTokenStore(r=r, retention_seconds=3600)
        return
    # ``app`` is pulled lazily here, so factories are wired by hand
    request.getfixturevalue("app")
    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield SQLAlchemyRefreshTokenStore()
    SQLAlchemySession.set(None)


@pytest.fixture()
def owner_id(store) -> str:
    """A user id valid for the adapter (a real row for the SQL store)."""
    if isinstance(store, SQLAlchemyRefreshTokenStore):
        return UserFactory().id
    return "user-1"


def _record(n: int, user_id: str, family: str = "fam-1", **kw) -> RefreshTokenRecord:
    base = datetime(2024, 1, 1, tzinfo=UTC)
    return RefreshTokenRecord(
        id=f"00000000-0000-0000-0000-{n:012d}",
        token_hash=f"{n:064x}",
        user_id=user_id,
        token_family=family,
        created_at=base + timedelta(seconds=n),
        **kw,
    )


def test_create_and_find(store, owner_id):
    created = store.create_record(_record(1, owner_id))
    found = store.find_by_id(created.id)
    assert found is not None
    assert found.token_hash == created.token_hash
    assert found.user_id == owner_id
    assert found.token_family == "fam-1"
    assert found.revoked is False


def test_find_unknown_returns_none(store):
    assert store.find_by_id("missing") is None


def test_conditional_update_succeeds_once(store, owner_id):
    rec = store.create_record(_record(1, owner_id))
    assert store.update_where({"id": rec.id, "revoked": False}, {"revoked": True}) == 1
    assert store.update_where({"id": rec.id, "revoked": False}, {"revoked": True}) == 0
    assert store.find_by_id(rec.id).revoked is True


def test_family_revocation_counts_changed_rows(store, owner_id):
    for n in range(3):
        store.create_record(_record(n + 1, owner_id, family="fam-a"))
    store.create_record(_record(10, owner_id, family="fam-b"))

    assert store.update_where({"token_family": "fam-a"}, {"revoked": True}) == 3
    assert store.count_where(token_family="fam-a", revoked=True) == 3
    assert store.count_where(token_family="fam-b", revoked=False) == 1


def test_list_where_orders_by_creation(store, owner_id):
    store.create_record(_record(3, owner_id))
    store.create_record(_record(1, owner_id))
    store.create_record(_record(2, owner_id))
    ids = [r.id for r in store.list_where(token_family="fam-1")]
    assert ids == [_record(n, owner_id).id for n in (1, 2, 3)]


def test_list_by_user(store, owner_id):
    store.create_record(_record(1, owner_id, family="a"))
    store.create_record(_record(2, owner_id, family="b"))
    assert {r.token_family for r in store.list_where(user_id=owner_id)} == {"a", "b"}


def test_filters_and_values_are_whitelisted(store, owner_id):
    rec = store.create_record(_record(1, owner_id))
    with pytest.raises(ValueError):
        store.update_where({"token_hash": rec.token_hash}, {"revoked": True})
    with pytest.raises(ValueError):
        store.update_where({"id": rec.id}, {"user_id": "someone-else"})
    with pytest.raises(ValueError):
        store.update_where({}, {"revoked": True})


def test_concurrent_claims_have_a_single_winner():
    """Only one of many racing claims on the same record observes a change."""
    store = InMemoryRefreshTokenStore()
    rec = store.create_record(_record(1, "user-1"))
    results: list[int] = []
    barrier = threading.Barrier(16)

    def claim() -> None:
        barrier.wait()
        results.append(store.update_where({"id": rec.id, "revoked": False}, {"revoked": True}))

    threads = [threading.Thread(target=claim) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [0] * 15 + [1]


def test_memory_store_rejects_duplicate_ids():
    store = InMemoryRefreshTokenStore()
    store.create_record(_record(1, "user-1"))
    with pytest.raises(ValueError):
        store.create_record(_record(1, "user-1"))


def test_redis_keys_expire_with_retention():
    r = fakeredis.FakeRedis()
    store = RedisRefreshTokenStore(r=r, retention_seconds=120)
    rec = store.create_record(_record(1, "user-1"))
    assert 0 < r.ttl(f"rt:{rec.id}") <= 120
    assert r.sismember("rt:f:fam-1", rec.id)
    assert r.sismember("rt:u:user-1", rec.id)


def test_redis_store_requires_an_indexed_filter():
    store = RedisRefreshTokenStore(r=fakeredis.FakeRedis())
    with pytest.raises(ValueError):
        store.update_where({"revoked": False}, {"revoked": True})


def test_redis_list_prunes_expired_family_members():
    r = fakeredis.FakeRedis()
    store = RedisRefreshTokenStore(r=r)
    keep = store.create_record(_record(1, "user-1"))
    gone = store.create_record(_record(2, "user-1"))
    r.delete(f"rt:{gone.id}")

    assert [x.id for x in store.list_where(token_family="fam-1")] == [keep.id]
    assert not r.sismember("rt:f:fam-1", gone.id)
