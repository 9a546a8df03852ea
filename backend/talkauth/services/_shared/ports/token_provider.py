from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class TokenVerificationError(Exception):
    """
    Raised by a :class:`TokenProvider` when a token cannot be trusted.

    :param reason: Short machine reason (``expired``, ``malformed``,
        ``bad_signature``, ``wrong_type``).
    """

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message or f"Token rejected: {reason}")
        self.reason = reason


@dataclass(frozen=True, slots=True)
class TokenInfo:
    """
    Decoded claims view of a signed token.

    :ivar expiration_epoch_millis: Absolute expiry in epoch milliseconds. A
        non-positive value marks an already-expired or unusable token.
    :ivar subject_id: Account id the token was issued to. Never ``None``.
    :ivar token_type: ``"access"`` or ``"refresh"``.
    :ivar jti: Unique token identifier, the revocation key.
    :ivar roles: Role authorities (access tokens only).
    :ivar nickname: Display nickname (access tokens only).
    """

    expiration_epoch_millis: int
    subject_id: str
    token_type: str = ACCESS_TOKEN_TYPE
    jti: str | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)
    nickname: str | None = None

    def __post_init__(self) -> None:
        if self.subject_id is None:
            raise ValueError("subject_id must not be None")

    @classmethod
    def expired(cls, subject_id: str, token_type: str = ACCESS_TOKEN_TYPE) -> TokenInfo:
        """Sentinel for a token that must be treated as already expired."""
        return cls(expiration_epoch_millis=0, subject_id=subject_id, token_type=token_type)

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(max(self.expiration_epoch_millis, 0) / 1000, tz=UTC)

    def remaining_millis(self, at_millis: int | None = None) -> int:
        """
        Milliseconds left before expiry (negative once expired).

        :param at_millis: Reference instant; defaults to now.
        :type at_millis: int | None
        """
        reference = now_millis() if at_millis is None else at_millis
        return self.expiration_epoch_millis - reference

    def remaining(self, at_millis: int | None = None) -> timedelta:
        return timedelta(milliseconds=max(self.remaining_millis(at_millis), 0))

    def is_expired(self, at_millis: int | None = None) -> bool:
        """``True`` iff the remaining lifetime is zero or negative."""
        return self.remaining_millis(at_millis) <= 0


class TokenProvider(Protocol):
    """Port for signing and verifying self-contained tokens."""

    def mint(
        self,
        *,
        subject_id: str,
        token_type: str,
        ttl: timedelta,
        claims: Mapping[str, Any] | None = None,
    ) -> str:
        """Sign a token for ``subject_id`` valid for ``ttl``."""
        ...

    def verify(
        self,
        token: str,
        *,
        expected_type: str | None = None,
        allow_expired: bool = False,
    ) -> TokenInfo:
        """
        Check signature (and expiry unless ``allow_expired``) and decode.

        :raises TokenVerificationError: When the token cannot be trusted.
        """
        ...
