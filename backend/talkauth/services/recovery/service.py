# talkauth/services/recovery/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta

from talkauth.services._shared.base import BaseService, ServiceContext
from talkauth.services._shared.errors import AuthenticationFailedError, NotFoundError
from talkauth.services._shared.ports import (
    CodePurpose,
    PasswordHasher,
    SessionStore,
)
from talkauth.services.recovery.dto import (
    AccountRecoveryIn,
    PasswordResetIn,
    PasswordResetRequestIn,
    RecoveryCodeIn,
    ResetGrantOut,
)
from talkauth.services.verification.codes import generate_reset_grant
from talkauth.services.verification.dto import ConfirmCodeIn, IssueCodeIn
from talkauth.services.verification.service import (
    EmailVerificationService,
    normalize_email,
)

log = logging.getLogger(__name__)


class AccountRecoveryService(BaseService):
    """
    Account-id recovery and password reset over emailed codes.

    Flows
    -----
    1. ``send_account_recovery_code`` -> ``recover_account_id``.
    2. ``send_password_reset_code`` -> ``verify_password_reset_code`` (grant)
       -> ``reset_password``.

    A successful reset replaces the hash and drops the refresh session, so
    every device must sign in again once its access token lapses.
    """

    def __init__(
        self,
        *,
        verification: EmailVerificationService,
        session_store: SessionStore,
        password_hasher: PasswordHasher,
        grant_ttl: timedelta = timedelta(minutes=10),
        grant_generator: Callable[[], str] = generate_reset_grant,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.verification = verification
        self.sessions = session_store
        self.passwords = password_hasher
        self.grant_ttl = grant_ttl
        self._generate_grant = grant_generator

    # ------------------------------------------------------------------ #
    # Account-id recovery
    # ------------------------------------------------------------------ #

    def send_account_recovery_code(self, dto: AccountRecoveryIn) -> None:
        """
        Mail a recovery code bound to the account matching name and email.

        :raises NotFoundError: If no account matches (``account_not_found``).
        """
        with self.ro_uow() as uow:
            account = uow.accounts.find_by_name_and_email(dto.display_name, dto.email)
            if account is None:
                raise NotFoundError("Account", normalize_email(dto.email))
            account_id = account.account_id

        self.verification.issue_code(
            IssueCodeIn(
                email=dto.email,
                purpose=CodePurpose.ACCOUNT_RECOVERY,
                account_id=account_id,
            )
        )

    def recover_account_id(self, dto: RecoveryCodeIn) -> str:
        """Consume a recovery code and return the account id it was bound to."""
        account_id = self.verification.confirm_code(
            ConfirmCodeIn(email=dto.email, code=dto.code, purpose=CodePurpose.ACCOUNT_RECOVERY)
        )
        if account_id is None:
            raise NotFoundError("Account", normalize_email(dto.email))
        return account_id

    # ------------------------------------------------------------------ #
    # Password reset
    # ------------------------------------------------------------------ #

    def send_password_reset_code(self, dto: PasswordResetRequestIn) -> None:
        """
        Mail a reset code when name, email and account id all match.

        :raises NotFoundError: On any mismatch (``account_not_found``).
        """
        with self.ro_uow() as uow:
            account = uow.accounts.find_by_name_and_email(dto.display_name, dto.email)
            if account is None or account.account_id != dto.account_id.strip():
                raise NotFoundError("Account", dto.account_id)
            account_id = account.account_id

        # A new request invalidates any grant from an earlier one
        self.verification.codes.delete(
            purpose=CodePurpose.RESET_GRANT, email=normalize_email(dto.email)
        )
        self.verification.issue_code(
            IssueCodeIn(
                email=dto.email,
                purpose=CodePurpose.PASSWORD_RESET,
                account_id=account_id,
            )
        )

    def verify_password_reset_code(self, dto: RecoveryCodeIn) -> ResetGrantOut:
        """
        Trade a reset code for a short-lived grant.

        The grant lives in the same code store under its own purpose, bound
        to the account the code was issued for.
        """
        account_id = self.verification.confirm_code(
            ConfirmCodeIn(email=dto.email, code=dto.code, purpose=CodePurpose.PASSWORD_RESET)
        )
        if account_id is None:
            raise NotFoundError("Account", normalize_email(dto.email))

        grant = self._generate_grant()
        self.verification.codes.save(
            purpose=CodePurpose.RESET_GRANT,
            email=normalize_email(dto.email),
            code=grant,
            ttl=self.grant_ttl,
            account_id=account_id,
        )
        return ResetGrantOut(grant=grant, expires_in=int(self.grant_ttl.total_seconds()))

    def reset_password(self, dto: PasswordResetIn) -> None:
        """
        Consume a grant and store the new password hash.

        :raises AuthenticationFailedError: Unknown, expired or wrong grant
            (``invalid_reset_grant``).
        :raises NotFoundError: The account disappeared meanwhile.
        """
        email = normalize_email(dto.email)
        result = self.verification.codes.consume(
            purpose=CodePurpose.RESET_GRANT, email=email, code=dto.grant
        )
        if not result.ok or result.account_id is None:
            log.info("Password reset rejected", extra={"reason": result.status.name.lower()})
            raise AuthenticationFailedError(
                "Invalid or expired reset grant", code="invalid_reset_grant"
            )

        account_id = result.account_id
        password_hash = self.passwords.hash(dto.new_password)
        with self.rw_uow() as uow:
            account = uow.accounts.get_by_account_id(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            uow.accounts.update_password(account, password_hash)

        self.sessions.delete(account_id)
        log.info("Password reset", extra={"subject_id": account_id})
