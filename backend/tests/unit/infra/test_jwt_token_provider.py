# tests/unit/infra/test_jwt_token_provider.py
from __future__ import annotations

import time
from datetime import timedelta

import jwt as pyjwt
import pytest
from talkauth.infra.jwt import JWTTokenProvider
from talkauth.services._shared.ports import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenVerificationError,
)


@pytest.fixture()
def provider(app, db) -> JWTTokenProvider:
    """JWT adapter; ``db`` keeps an app context pushed for the whole session."""
    return JWTTokenProvider()


def test_mint_then_verify_keeps_subject_and_roles(provider):
    token = provider.mint(
        subject_id="alice01",
        token_type=ACCESS_TOKEN_TYPE,
        ttl=timedelta(minutes=30),
        claims={"roles": ["ROLE_USER"], "nickname": "ali"},
    )

    info = provider.verify(token, expected_type=ACCESS_TOKEN_TYPE)
    assert info.subject_id == "alice01"
    assert info.roles == ("ROLE_USER",)
    assert info.nickname == "ali"
    assert info.token_type == ACCESS_TOKEN_TYPE
    assert info.jti
    assert info.is_expired() is False
    assert timedelta(minutes=29) < info.remaining() <= timedelta(minutes=30)


def test_refresh_token_carries_subject_only(provider):
    token = provider.mint(subject_id="alice01", token_type=REFRESH_TOKEN_TYPE, ttl=timedelta(days=7))

    info = provider.verify(token, expected_type=REFRESH_TOKEN_TYPE)
    assert info.subject_id == "alice01"
    assert info.roles == ()
    assert info.nickname is None


def test_tokens_minted_together_differ(provider):
    a = provider.mint(subject_id="s", token_type=REFRESH_TOKEN_TYPE, ttl=timedelta(days=7))
    b = provider.mint(subject_id="s", token_type=REFRESH_TOKEN_TYPE, ttl=timedelta(days=7))
    assert a != b


def test_wrong_type_is_rejected(provider):
    token = provider.mint(subject_id="s", token_type=REFRESH_TOKEN_TYPE, ttl=timedelta(days=7))

    with pytest.raises(TokenVerificationError) as err:
        provider.verify(token, expected_type=ACCESS_TOKEN_TYPE)
    assert err.value.reason == "wrong_type"


def test_expired_token_only_decodes_when_allowed(provider):
    token = provider.mint(
        subject_id="s", token_type=ACCESS_TOKEN_TYPE, ttl=timedelta(seconds=-5)
    )

    with pytest.raises(TokenVerificationError) as err:
        provider.verify(token)
    assert err.value.reason == "expired"

    info = provider.verify(token, allow_expired=True)
    assert info.subject_id == "s"
    assert info.is_expired() is True


def test_foreign_signature_is_rejected(provider):
    forged = pyjwt.encode(
        {"sub": "s", "type": "access", "jti": "j", "exp": int(time.time()) + 600},
        "some-other-secret-that-is-long-enough-for-hs256",
        algorithm="HS256",
    )

    with pytest.raises(TokenVerificationError) as err:
        provider.verify(forged)
    assert err.value.reason == "bad_signature"


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c"])
def test_garbage_is_malformed(provider, garbage):
    with pytest.raises(TokenVerificationError) as err:
        provider.verify(garbage)
    assert err.value.reason == "malformed"


def test_unknown_token_type_cannot_be_minted(provider):
    with pytest.raises(ValueError):
        provider.mint(subject_id="s", token_type="id", ttl=timedelta(minutes=1))
