# tests/unit/infra/test_redis_session_store.py
"""
Unit tests for RedisSessionStore using fakeredis.

These tests exercise the main flows:
- save + get (overwrite semantics, TTL)
- rotate (success, superseded token, missing record, concurrent callers)
- delete
- connectivity failures surfacing as StoreUnavailableError
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import fakeredis
import pytest
from talkauth.infra.redis import RedisSessionStore
from talkauth.services._shared.errors import StoreUnavailableError
from talkauth.services._shared.ports import RotationResult, digest_token

WEEK = timedelta(days=7)


@pytest.fixture
def store(fake_redis):
    """Provide a RedisSessionStore backed by FakeRedis."""
    return RedisSessionStore(r=fake_redis)


def test_save_and_get(store, fake_redis):
    store.save(subject_id="alice01", refresh_token="rt-1", roles=["ROLE_USER"], ttl=WEEK)

    view = store.get("alice01")
    assert view is not None
    assert view.subject_id == "alice01"
    assert view.token_digest == digest_token("rt-1")
    assert view.roles == ("ROLE_USER",)

    # The raw token never reaches the store
    assert b"rt-1" not in fake_redis.hgetall("session:alice01").values()
    assert 0 < fake_redis.ttl("session:alice01") <= int(WEEK.total_seconds())


def test_save_overwrites_previous_session(store):
    store.save(subject_id="alice01", refresh_token="rt-1", roles=["ROLE_USER"], ttl=WEEK)
    store.save(subject_id="alice01", refresh_token="rt-2", roles=["ROLE_USER"], ttl=WEEK)

    assert store.get("alice01").token_digest == digest_token("rt-2")
    assert (
        store.rotate(
            subject_id="alice01",
            presented_token="rt-1",
            new_token="rt-3",
            roles=["ROLE_USER"],
            ttl=WEEK,
        )
        is RotationResult.MISMATCH
    )


def test_rotate_success_then_old_token_mismatches(store):
    store.save(subject_id="u2", refresh_token="old", roles=["ROLE_USER"], ttl=WEEK)

    res = store.rotate(
        subject_id="u2", presented_token="old", new_token="new", roles=["ROLE_USER"], ttl=WEEK
    )
    assert res is RotationResult.OK
    assert store.get("u2").token_digest == digest_token("new")

    again = store.rotate(
        subject_id="u2", presented_token="old", new_token="newer", roles=["ROLE_USER"], ttl=WEEK
    )
    assert again is RotationResult.MISMATCH
    assert store.get("u2").token_digest == digest_token("new")


def test_rotate_missing_record(store):
    res = store.rotate(
        subject_id="ghost", presented_token="x", new_token="y", roles=[], ttl=WEEK
    )
    assert res is RotationResult.NOT_FOUND
    assert store.get("ghost") is None


def test_delete(store):
    store.save(subject_id="u3", refresh_token="rt", roles=["ROLE_USER"], ttl=WEEK)

    assert store.delete("u3") is True
    assert store.get("u3") is None
    assert store.delete("u3") is False


def test_unreachable_server_raises_store_unavailable():
    server = fakeredis.FakeServer()
    server.connected = False
    store = RedisSessionStore(r=fakeredis.FakeRedis(server=server))

    with pytest.raises(StoreUnavailableError) as err:
        store.get("alice01")
    assert err.value.status == 503


def test_concurrent_rotations_with_same_token_have_a_single_winner():
    server = fakeredis.FakeServer()
    RedisSessionStore(r=fakeredis.FakeRedis(server=server)).save(
        subject_id="race01", refresh_token="rt-0", roles=["ROLE_USER"], ttl=WEEK
    )

    workers = 8
    barrier = threading.Barrier(workers)

    def rotate(n):
        own = RedisSessionStore(r=fakeredis.FakeRedis(server=server))
        barrier.wait()
        return own.rotate(
            subject_id="race01",
            presented_token="rt-0",
            new_token=f"rt-{n + 1}",
            roles=["ROLE_USER"],
            ttl=WEEK,
        )

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(rotate, range(workers)))

    assert results.count(RotationResult.OK) == 1
    assert results.count(RotationResult.MISMATCH) == workers - 1
    winner = results.index(RotationResult.OK) + 1
    view = RedisSessionStore(r=fakeredis.FakeRedis(server=server)).get("race01")
    assert view.token_digest == digest_token(f"rt-{winner}")
