import pytest
from talkauth.models import Account
from talkauth.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from talkauth.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)

from tests.factories.account import AccountFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, db, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(AccountFactory.build())
            uow.session.flush()
        session.rollback()

    def test_allows_reads(self, app, db, session):
        """
        Read operations work normally within the RO UoW.
        """
        with RWuow() as uow:
            uow.accounts.add(AccountFactory.build(account_id="reader01"))

        with ROuow() as uow:
            assert uow.accounts.get_by_account_id("reader01") is not None
            assert uow.session.query(Account).count() >= 1

    def test_disallows_commit(self, app, db, session):
        """
        RO UoW must reject commit().
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_guard_is_removed_on_exit(self, app, db, session):
        """
        After the RO scope ends, writers can flush again on the same session.
        """
        with ROuow():
            pass

        with RWuow() as uow:
            uow.accounts.add(AccountFactory.build(account_id="writer01"))

        assert session.query(Account).filter_by(account_id="writer01").count() == 1
