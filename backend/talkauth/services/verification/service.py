# talkauth/services/verification/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta

from talkauth.services._shared.base import BaseService, ServiceContext
from talkauth.services._shared.errors import (
    AuthenticationFailedError,
    NotFoundError,
    ValidationConflictError,
)
from talkauth.services._shared.ports import (
    CodePurpose,
    ConsumeStatus,
    MailSender,
    VerificationCodeStore,
)
from talkauth.services.verification.codes import generate_code
from talkauth.services.verification.dto import ConfirmCodeIn, IssueCodeIn

log = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class EmailVerificationService(BaseService):
    """
    Issue and confirm short-lived numeric codes sent by email.

    One pending code exists per (purpose, email); issuing again replaces it.
    A code is single-use: a match deletes it, a mismatch leaves it in place
    so the user can retry until it expires.
    """

    def __init__(
        self,
        *,
        code_store: VerificationCodeStore,
        mail_sender: MailSender,
        code_ttl: timedelta = timedelta(minutes=5),
        code_generator: Callable[[], str] = generate_code,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param code_store: Expiring single-use code storage.
        :param mail_sender: Delivery backend.
        :param code_ttl: Lifetime of an issued code.
        :param code_generator: Source of codes; tests pin it.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.codes = code_store
        self.mail = mail_sender
        self.code_ttl = code_ttl
        self._generate = code_generator

    def issue_code(self, dto: IssueCodeIn) -> str:
        """
        Generate a code, store it under (purpose, email) and mail it.

        :param dto: Issue input.
        :returns: The issued code.
        """
        email = normalize_email(dto.email)
        code = self._generate()
        self.codes.save(
            purpose=dto.purpose,
            email=email,
            code=code,
            ttl=self.code_ttl,
            account_id=dto.account_id,
        )
        self.mail.send_code(email=email, code=code, purpose=dto.purpose, ttl=self.code_ttl)
        log.info("Verification code issued", extra={"purpose": dto.purpose.value})
        return code

    def confirm_code(self, dto: ConfirmCodeIn) -> str | None:
        """
        Check and consume a pending code.

        :param dto: Confirm input.
        :returns: The account id bound at issue time, or ``None`` for sign-up codes.
        :raises NotFoundError: No pending code (never issued, consumed or expired).
        :raises AuthenticationFailedError: The code differs, compared exactly as
            typed with no trimming; it stays pending.
        """
        email = normalize_email(dto.email)
        result = self.codes.consume(purpose=dto.purpose, email=email, code=dto.code)

        if result.status is ConsumeStatus.NOT_FOUND:
            raise NotFoundError(
                "Verification code", email, error_code="verification_code_not_found"
            )
        if result.status is ConsumeStatus.MISMATCH:
            log.info(
                "Verification code rejected",
                extra={"purpose": dto.purpose.value, "reason": "mismatch"},
            )
            raise AuthenticationFailedError(
                "Verification code does not match", code="verification_code_mismatch"
            )

        log.info("Verification code confirmed", extra={"purpose": dto.purpose.value})
        return result.account_id

    def check_email_and_send_code(self, email: str) -> str:
        """
        Reject an already registered email, otherwise issue a sign-up code.

        :raises ValidationConflictError: If the email belongs to an account.
        """
        normalized = normalize_email(email)
        with self.ro_uow() as uow:
            taken = uow.accounts.exists_by_email(normalized)
        if taken:
            raise ValidationConflictError("email already in use")
        return self.issue_code(IssueCodeIn(email=normalized, purpose=CodePurpose.SIGN_UP))
