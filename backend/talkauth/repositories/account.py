"""Account repository: the credential store adapter."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from talkauth.models.account import Account
from talkauth.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    Lookups, uniqueness probes and password-hash updates. It NEVER hashes
    passwords or issues tokens; services do that through their ports.
    """

    model = Account

    def _filterable_fields(self):
        return {
            "account_id": Account.account_id,
            "nickname": Account.nickname,
            "email": Account.email,
            "display_name": Account.display_name,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_account_id(self, account_id: str) -> Account | None:
        """Fetch an account by its public identifier.

        :param account_id: Sign-in identifier (token subject).
        :type account_id: str
        :returns: Account or ``None`` when not found.
        :rtype: Account | None
        """
        stmt = select(Account).where(Account.account_id == account_id.strip())
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def find_by_name_and_email(self, display_name: str, email: str) -> Account | None:
        """Fetch the account matching both display name and email.

        Used by the recovery flows, which only know what the owner remembers.
        """
        stmt = select(Account).where(
            Account.display_name == display_name.strip(),
            Account.email == email.strip().lower(),
        )
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Existence ----------------------------

    def exists_by_account_id(self, account_id: str) -> bool:
        return self.exists(account_id=account_id.strip())

    def exists_by_email(self, email: str) -> bool:
        return self.exists(email=email.strip().lower())

    def exists_by_nickname(self, nickname: str) -> bool:
        return self.exists(nickname=nickname.strip())

    # ---------------------------- Credentials ----------------------------

    def update_password(self, account: Account, password_hash: str) -> None:
        """Replace the stored hash and flush.

        :param account: Account to update.
        :type account: Account
        :param password_hash: Already-hashed password.
        :type password_hash: str
        """
        account.password_hash = password_hash
        self.flush()
