"""Unit tests for AccountRepository."""

import pytest
from talkauth.repositories.account import AccountRepository

from tests.factories.account import AccountFactory


class TestAccountRepository:
    """Ensure ``AccountRepository`` performs credential-store operations."""

    @pytest.fixture()
    def repo(self):
        return AccountRepository()

    def test_get_by_account_id(self, repo, session):
        a = AccountFactory(account_id="alice01", nickname="ali")
        session.commit()

        fetched = repo.get_by_account_id("alice01")
        assert fetched is not None
        assert fetched.id == a.id
        assert fetched.nickname == "ali"
        assert repo.get_by_account_id("ghost") is None

    def test_existence_checks(self, repo, session):
        AccountFactory(account_id="bob01", nickname="bobby", email="bob@example.com")
        session.commit()

        assert repo.exists_by_account_id("bob01")
        assert repo.exists_by_nickname("bobby")
        assert repo.exists_by_email("BOB@example.com")
        assert not repo.exists_by_account_id("nobody")
        assert not repo.exists_by_nickname("nobody")
        assert not repo.exists_by_email("nobody@example.com")

    def test_find_by_name_and_email(self, repo, session):
        AccountFactory(display_name="Hana Lee", email="hana@example.com", account_id="hana01")
        session.commit()

        assert repo.find_by_name_and_email("Hana Lee", "Hana@Example.com").account_id == "hana01"
        assert repo.find_by_name_and_email("Hana Kim", "hana@example.com") is None

    def test_update_password(self, repo, session):
        a = AccountFactory()
        session.commit()

        repo.update_password(a, "new-hash")
        session.commit()

        assert repo.get_by_account_id(a.account_id).password_hash == "new-hash"

    def test_unknown_filter_is_rejected(self, repo):
        with pytest.raises(ValueError, match="not filterable"):
            repo.exists(password_hash="x")

    def test_delete(self, repo, session):
        a = AccountFactory(account_id="gone01")
        session.commit()

        repo.delete(a)
        session.commit()
        assert repo.get_by_account_id("gone01") is None
