"""Tests for the Account model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from talkauth.models.account import Account, Role


def _account(**overrides) -> Account:
    fields = {
        "account_id": "alice01",
        "password_hash": "hash",
        "display_name": "Alice Kim",
        "nickname": "ali",
        "email": "alice@example.com",
    }
    fields.update(overrides)
    return Account(**fields)


class TestAccount:
    def test_defaults_to_user_role(self, session):
        a = _account()
        session.add(a)
        session.commit()
        assert a.role is Role.USER
        assert a.created_at is not None

    def test_email_normalized(self):
        a = _account(email="  Alice@Example.COM ")
        assert a.email == "alice@example.com"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "a@nodot"])
    def test_email_rejected(self, email):
        with pytest.raises(ValueError):
            _account(email=email)

    @pytest.mark.parametrize("field", ["account_id", "nickname", "display_name"])
    def test_required_strings(self, field):
        with pytest.raises(ValueError):
            _account(**{field: "   "})

    def test_identifiers_are_stripped(self):
        a = _account(account_id=" alice01 ", nickname=" ali ")
        assert a.account_id == "alice01"
        assert a.nickname == "ali"

    @pytest.mark.parametrize(
        "dup",
        [
            {"nickname": "other", "email": "other@example.com"},
            {"account_id": "other01", "email": "other@example.com"},
            {"account_id": "other01", "nickname": "other"},
        ],
    )
    def test_unique_constraints(self, session, dup):
        session.add(_account())
        session.commit()

        session.add(_account(**dup))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()


class TestRole:
    def test_authority_round_trip(self):
        assert Role.USER.authority == "ROLE_USER"
        assert Role.from_authority("ROLE_ADMIN") is Role.ADMIN

    def test_unknown_authority(self):
        with pytest.raises(ValueError):
            Role.from_authority("ROLE_ROOT")
