"""Mail adapters delivering verification codes."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from datetime import timedelta
from email.message import EmailMessage

from talkauth.services._shared.errors import MailUnavailableError
from talkauth.services._shared.ports import CodePurpose, MailSender

log = logging.getLogger(__name__)

SUBJECTS = {
    CodePurpose.SIGN_UP: "[Talkpick] Confirm your email address",
    CodePurpose.ACCOUNT_RECOVERY: "[Talkpick] Find your account",
    CodePurpose.PASSWORD_RESET: "[Talkpick] Reset your password",
}


def render_code_message(
    *, sender: str, email: str, code: str, purpose: CodePurpose, ttl: timedelta
) -> EmailMessage:
    """
    Build the plain-text message carrying ``code``.

    :returns: Message ready for :meth:`smtplib.SMTP.send_message`.
    :rtype: email.message.EmailMessage
    """
    minutes = max(1, int(ttl.total_seconds() // 60))
    message = EmailMessage()
    message["From"] = sender
    message["To"] = email
    message["Subject"] = SUBJECTS.get(purpose, "[Talkpick] Verification code")
    message.set_content(
        f"Your verification code is {code}.\n"
        f"It expires in {minutes} minutes. If you did not request it, ignore this email.\n"
    )
    return message


@dataclass(slots=True)
class SmtpMailSender(MailSender):
    """
    Send codes through an SMTP relay, one connection per message.

    :param host: SMTP server host.
    :param port: SMTP server port.
    :param sender: ``From`` address.
    :param use_tls: Upgrade the connection with STARTTLS.
    :param username: Optional login user.
    :param password: Optional login password.
    :param timeout: Socket timeout in seconds.
    """

    host: str
    port: int
    sender: str
    use_tls: bool = False
    username: str | None = None
    password: str | None = None
    timeout: float = 10.0

    def send_code(self, *, email: str, code: str, purpose: CodePurpose, ttl: timedelta) -> None:
        message = render_code_message(
            sender=self.sender, email=email, code=code, purpose=purpose, ttl=ttl
        )
        try:
            with smtplib.SMTP(host=self.host, port=self.port, timeout=self.timeout) as conn:
                if self.use_tls:
                    conn.starttls()
                if self.username:
                    conn.login(self.username, self.password or "")
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            log.error("SMTP delivery failed via %s:%s", self.host, self.port, exc_info=True)
            raise MailUnavailableError() from exc
        log.info("Verification mail sent", extra={"purpose": purpose.value})


class LoggingMailSender(MailSender):
    """Development backend: writes the code to the application log instead of mailing it."""

    def send_code(self, *, email: str, code: str, purpose: CodePurpose, ttl: timedelta) -> None:
        log.info(
            "Verification code for %s: %s (valid %ss)",
            email,
            code,
            int(ttl.total_seconds()),
            extra={"purpose": purpose.value},
        )
