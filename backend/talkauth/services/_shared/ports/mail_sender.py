from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from .verification_code_store import CodePurpose


class MailSender(Protocol):
    """
    Port for delivering verification codes to an email address.

    Adapters raise :class:`~talkauth.services._shared.errors.MailUnavailableError`
    when the relay cannot take the message.
    """

    def send_code(
        self, *, email: str, code: str, purpose: CodePurpose, ttl: timedelta
    ) -> None: ...


@dataclass(frozen=True)
class SentMail:
    email: str
    code: str
    purpose: CodePurpose


class RecordingMailSender(MailSender):
    """Outbox double that keeps sent codes in memory for assertions."""

    def __init__(self) -> None:
        self.outbox: list[SentMail] = []

    def send_code(self, *, email: str, code: str, purpose: CodePurpose, ttl: timedelta) -> None:
        self.outbox.append(SentMail(email=email, code=code, purpose=purpose))

    def last_code(self, email: str) -> str | None:
        for mail in reversed(self.outbox):
            if mail.email == email:
                return mail.code
        return None
