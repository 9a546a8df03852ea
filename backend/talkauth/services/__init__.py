"""Application services: authentication, email verification and account recovery."""

from talkauth.services.auth.service import AuthService
from talkauth.services.recovery.service import AccountRecoveryService
from talkauth.services.verification.service import EmailVerificationService

__all__ = ["AuthService", "EmailVerificationService", "AccountRecoveryService"]
