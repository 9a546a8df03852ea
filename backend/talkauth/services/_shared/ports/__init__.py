"""
talkauth.services._shared.ports
===============================

*Ports* (hexagonal interfaces) the auth services depend on.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` and the :class:`~.TokenInfo` claims view.
- :mod:`session_store`:
    :class:`~.SessionStore`, :class:`~.RotationResult` and
    :class:`~.SessionRecordView` for the one-session-per-subject record.
- :mod:`denylist_store`:
    :class:`~.TokenDenylistStore` for revoked access tokens.
- :mod:`verification_code_store`:
    :class:`~.VerificationCodeStore` for single-use email codes.
- :mod:`password_hasher`:
    :class:`~.PasswordHasher`.
- :mod:`mail_sender`:
    :class:`~.MailSender`.

Concrete adapters live under ``talkauth.infra``; the ``InMemory*`` and
``Recording*`` classes here are test doubles.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .mail_sender import MailSender, RecordingMailSender
from .password_hasher import PasswordHasher
from .session_store import (
    InMemorySessionStore,
    RotationResult,
    SessionRecordView,
    SessionStore,
    digest_token,
)
from .token_provider import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenInfo,
    TokenProvider,
    TokenVerificationError,
)
from .verification_code_store import (
    CodePurpose,
    ConsumeResult,
    ConsumeStatus,
    InMemoryVerificationCodeStore,
    VerificationCodeStore,
)

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "TokenInfo",
    "TokenProvider",
    "TokenVerificationError",
    "SessionStore",
    "SessionRecordView",
    "RotationResult",
    "InMemorySessionStore",
    "digest_token",
    "TokenDenylistStore",
    "InMemoryDenylistStore",
    "VerificationCodeStore",
    "CodePurpose",
    "ConsumeResult",
    "ConsumeStatus",
    "InMemoryVerificationCodeStore",
    "PasswordHasher",
    "MailSender",
    "RecordingMailSender",
]
