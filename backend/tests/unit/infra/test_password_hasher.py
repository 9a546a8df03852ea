# tests/unit/infra/test_password_hasher.py
from __future__ import annotations

import pytest
from talkauth.infra.security import WerkzeugPasswordHasher


def test_hash_is_salted_and_verifiable(password_hasher):
    h1 = password_hasher.hash("pw1")
    h2 = password_hasher.hash("pw1")

    assert h1 != h2
    assert "pw1" not in h1
    assert password_hasher.verify(h1, "pw1") is True
    assert password_hasher.verify(h1, "pw2") is False


def test_default_method_is_scrypt():
    hasher = WerkzeugPasswordHasher()
    assert hasher.hash("pw").startswith("scrypt:")


@pytest.mark.parametrize("hashed, raw", [("", "pw"), ("pbkdf2:sha256:1000$x$y", "")])
def test_verify_rejects_empty_inputs(password_hasher, hashed, raw):
    assert password_hasher.verify(hashed, raw) is False


def test_empty_password_cannot_be_hashed(password_hasher):
    with pytest.raises(ValueError):
        password_hasher.hash("")
