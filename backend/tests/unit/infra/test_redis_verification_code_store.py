# tests/unit/infra/test_redis_verification_code_store.py
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import fakeredis
import pytest
from talkauth.infra.redis import RedisVerificationCodeStore
from talkauth.services._shared.ports import CodePurpose, ConsumeStatus

TTL = timedelta(minutes=5)


@pytest.fixture
def store(fake_redis):
    return RedisVerificationCodeStore(r=fake_redis)


def test_consume_match_deletes_entry(store, fake_redis):
    store.save(purpose=CodePurpose.SIGN_UP, email="bob@example.com", code="123456", ttl=TTL)
    assert 0 < fake_redis.ttl("verify:signup:bob@example.com") <= 300

    first = store.consume(purpose=CodePurpose.SIGN_UP, email="bob@example.com", code="123456")
    assert first.ok
    assert first.account_id is None

    second = store.consume(purpose=CodePurpose.SIGN_UP, email="bob@example.com", code="123456")
    assert second.status is ConsumeStatus.NOT_FOUND


def test_mismatch_keeps_entry(store, fake_redis):
    store.save(purpose=CodePurpose.SIGN_UP, email="bob@example.com", code="123456", ttl=TTL)

    res = store.consume(purpose=CodePurpose.SIGN_UP, email="bob@example.com", code="000000")
    assert res.status is ConsumeStatus.MISMATCH
    assert fake_redis.hget("verify:signup:bob@example.com", "code") == b"123456"
    assert store.consume(purpose=CodePurpose.SIGN_UP, email="bob@example.com", code="123456").ok


def test_account_binding_round_trips(store):
    store.save(
        purpose=CodePurpose.ACCOUNT_RECOVERY,
        email="hana@example.com",
        code="777777",
        ttl=TTL,
        account_id="hana01",
    )
    res = store.consume(
        purpose=CodePurpose.ACCOUNT_RECOVERY, email="hana@example.com", code="777777"
    )
    assert res.ok
    assert res.account_id == "hana01"


def test_save_replaces_and_drops_stale_binding(store):
    store.save(
        purpose=CodePurpose.PASSWORD_RESET,
        email="a@example.com",
        code="111111",
        ttl=TTL,
        account_id="a01",
    )
    store.save(purpose=CodePurpose.PASSWORD_RESET, email="a@example.com", code="222222", ttl=TTL)

    res = store.consume(purpose=CodePurpose.PASSWORD_RESET, email="a@example.com", code="222222")
    assert res.ok
    assert res.account_id is None


def test_delete(store, fake_redis):
    store.save(purpose=CodePurpose.SIGN_UP, email="x@example.com", code="999999", ttl=TTL)

    assert store.delete(purpose=CodePurpose.SIGN_UP, email="x@example.com") is True
    assert store.delete(purpose=CodePurpose.SIGN_UP, email="x@example.com") is False
    assert not fake_redis.exists("verify:signup:x@example.com")


def test_concurrent_consumers_have_a_single_winner():
    server = fakeredis.FakeServer()
    store = RedisVerificationCodeStore(r=fakeredis.FakeRedis(server=server))
    store.save(purpose=CodePurpose.SIGN_UP, email="race@example.com", code="424242", ttl=TTL)

    workers = 8
    barrier = threading.Barrier(workers)

    def consume(_):
        # Each thread gets its own client on the shared server
        own = RedisVerificationCodeStore(r=fakeredis.FakeRedis(server=server))
        barrier.wait()
        return own.consume(purpose=CodePurpose.SIGN_UP, email="race@example.com", code="424242")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(consume, range(workers)))

    assert sum(r.ok for r in results) == 1
    assert all(r.ok or r.status is ConsumeStatus.NOT_FOUND for r in results)
