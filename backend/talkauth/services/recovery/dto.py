# talkauth/services/recovery/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AccountRecoveryIn:
    """
    Input DTO to request an account-id recovery code.

    :param display_name: Real name on the account.
    :type display_name: str
    :param email: Email on the account.
    :type email: str
    """

    display_name: str
    email: str


@dataclass(frozen=True, slots=True)
class PasswordResetRequestIn:
    """
    Input DTO to request a password-reset code.

    :param display_name: Real name on the account.
    :type display_name: str
    :param email: Email on the account.
    :type email: str
    :param account_id: Account whose password will be reset.
    :type account_id: str
    """

    display_name: str
    email: str
    account_id: str


@dataclass(frozen=True, slots=True)
class RecoveryCodeIn:
    """Code typed by the user for one of the recovery flows."""

    email: str
    code: str


@dataclass(frozen=True, slots=True)
class ResetGrantOut:
    """
    Output DTO after a verified reset code.

    :param grant: Opaque single-use grant for :meth:`reset_password`.
    :type grant: str
    :param expires_in: Seconds until the grant lapses.
    :type expires_in: int
    """

    grant: str
    expires_in: int


@dataclass(frozen=True, slots=True)
class PasswordResetIn:
    email: str
    grant: str
    new_password: str
