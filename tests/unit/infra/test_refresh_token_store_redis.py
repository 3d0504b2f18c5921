"""
Unit tests for RedisRefreshTokenStore using fakeredis.

These tests exercise the main flows:
- issue + get (hash layout, key TTL, user index)
- lookup_owner for active / revoked / expired / unknown tokens
- revoke (HSETNX keeps the first instant)
- revoke_all_for_user, purge_stale and reset_all
- connection failures surfacing as StorageError
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import fakeredis
import pytest

from chirpy.infra.redis import RedisRefreshTokenStore
from chirpy.services._shared.errors import (
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    RefreshTokenRevokedError,
    StorageError,
)
from chirpy.services._shared.ports import RefreshTokenState


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    """Provide a RedisRefreshTokenStore backed by FakeRedis."""
    return RedisRefreshTokenStore(r=fake_redis)


def test_issue_writes_hash_index_and_ttl(store, fake_redis):
    user_id = uuid4()
    record = store.issue(user_id, ttl=timedelta(days=2))

    h = fake_redis.hgetall(f"rt:{record.token}")
    assert h[b"user_id"] == str(user_id).encode()
    assert b"revoked_at" not in h
    assert fake_redis.sismember(f"rt:u:{user_id}", record.token)
    ttl = fake_redis.ttl(f"rt:{record.token}")
    assert 0 < ttl <= int(timedelta(days=2).total_seconds())


def test_zero_ttl_keeps_zero_lifetime(store, fake_redis):
    record = store.issue(uuid4(), ttl=timedelta(0))

    assert record.expires_at == record.created_at
    assert fake_redis.ttl(f"rt:{record.token}") <= 1
    with pytest.raises(RefreshTokenExpiredError):
        store.lookup_owner(record.token)


def test_get_roundtrips_the_record(store):
    user_id = uuid4()
    record = store.issue(user_id)

    view = store.get(record.token)
    assert view == record
    assert view.state() is RefreshTokenState.ACTIVE
    assert store.lookup_owner(record.token) == user_id


def test_get_unknown_returns_none(store):
    assert store.get("nope") is None
    with pytest.raises(RefreshTokenNotFoundError):
        store.lookup_owner("nope")


def test_revoke_uses_first_instant_and_blocks_lookup(store, fake_redis):
    record = store.issue(uuid4())
    store.revoke(record.token)
    first = fake_redis.hget(f"rt:{record.token}", "revoked_at")

    # Forge a different instant to prove HSETNX does not overwrite
    fake_redis.hset(f"rt:{record.token}", "revoked_at", int(first) - 100)
    store.revoke(record.token)

    assert int(fake_redis.hget(f"rt:{record.token}", "revoked_at")) == int(first) - 100
    with pytest.raises(RefreshTokenRevokedError):
        store.lookup_owner(record.token)


def test_revoke_unknown_does_not_create_key(store, fake_redis):
    store.revoke("ghost")
    assert not fake_redis.exists("rt:ghost")


def test_lookup_past_expires_at_raises_expired(store, fake_redis):
    """Expiry is evaluated lazily from ``expires_at``, not only by key TTL."""
    now = _now()
    fake_redis.hset(
        "rt:stale",
        mapping={
            "user_id": str(uuid4()),
            "created_at": int((now - timedelta(days=61)).timestamp()),
            "expires_at": int((now - timedelta(seconds=1)).timestamp()),
        },
    )

    with pytest.raises(RefreshTokenExpiredError):
        store.lookup_owner("stale")


def test_revoke_all_for_user(store):
    alice, bob = uuid4(), uuid4()
    a = [store.issue(alice) for _ in range(3)]
    b = store.issue(bob)
    store.revoke(a[0].token)

    assert store.revoke_all_for_user(alice) == 2
    assert all(store.get(r.token).revoked for r in a)
    assert store.lookup_owner(b.token) == bob


def test_purge_stale_removes_revoked_and_dangling_members(store, fake_redis):
    user_id = uuid4()
    keep = store.issue(user_id)
    gone = store.issue(user_id)
    store.revoke(gone.token)
    fake_redis.sadd(f"rt:u:{user_id}", "already-evicted")

    assert store.purge_stale() == 1
    assert store.get(keep.token) is not None
    assert store.get(gone.token) is None
    assert fake_redis.smembers(f"rt:u:{user_id}") == {keep.token.encode()}


def test_reset_all_deletes_tokens_and_indexes(store, fake_redis):
    for _ in range(2):
        store.issue(uuid4())
    fake_redis.set("unrelated", "1")

    assert store.reset_all() == 2
    assert list(fake_redis.scan_iter(match="rt:*")) == []
    assert fake_redis.get("unrelated") == b"1"


def test_connection_loss_surfaces_as_storage_error():
    server = fakeredis.FakeServer()
    server.connected = False
    store = RedisRefreshTokenStore(r=fakeredis.FakeRedis(server=server))

    with pytest.raises(StorageError):
        store.issue(uuid4())
    with pytest.raises(StorageError):
        store.lookup_owner("anything")
    with pytest.raises(StorageError):
        store.revoke("anything")
