from __future__ import annotations

import hmac
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum, auto
from typing import Protocol


class CodePurpose(str, Enum):
    """Namespace of a pending code; one outstanding entry per (purpose, email)."""

    SIGN_UP = "signup"
    ACCOUNT_RECOVERY = "account-recovery"
    PASSWORD_RESET = "password-reset"
    RESET_GRANT = "reset-grant"


class ConsumeStatus(Enum):
    OK = auto()
    NOT_FOUND = auto()
    MISMATCH = auto()


@dataclass(frozen=True, slots=True)
class ConsumeResult:
    """
    Outcome of a single-use code check.

    :ivar status: Whether the code matched, was missing/expired, or differed.
    :ivar account_id: Account bound to the code at issue time, if any.
    """

    status: ConsumeStatus
    account_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ConsumeStatus.OK


class VerificationCodeStore(Protocol):
    """
    Expiring, single-use code storage keyed by purpose and email.

    ``consume`` MUST delete the entry atomically on a match and leave it in
    place on a mismatch.
    """

    def save(
        self,
        *,
        purpose: CodePurpose,
        email: str,
        code: str,
        ttl: timedelta,
        account_id: str | None = None,
    ) -> None: ...

    def consume(self, *, purpose: CodePurpose, email: str, code: str) -> ConsumeResult: ...

    def delete(self, *, purpose: CodePurpose, email: str) -> bool: ...


@dataclass(frozen=True)
class _Pending:
    code: str
    account_id: str | None
    expires_at: datetime


class InMemoryVerificationCodeStore(VerificationCodeStore):
    """In-memory code store with TTL, used by unit tests."""

    def __init__(self) -> None:
        self._pending: dict[tuple[str, str], _Pending] = {}
        self._lock = threading.Lock()

    def save(
        self,
        *,
        purpose: CodePurpose,
        email: str,
        code: str,
        ttl: timedelta,
        account_id: str | None = None,
    ) -> None:
        with self._lock:
            self._pending[(purpose.value, email)] = _Pending(
                code=code,
                account_id=account_id,
                expires_at=datetime.now(UTC) + ttl,
            )

    def consume(self, *, purpose: CodePurpose, email: str, code: str) -> ConsumeResult:
        key = (purpose.value, email)
        with self._lock:
            pending = self._pending.get(key)
            if pending is None or pending.expires_at <= datetime.now(UTC):
                self._pending.pop(key, None)
                return ConsumeResult(ConsumeStatus.NOT_FOUND)
            if not hmac.compare_digest(pending.code.encode(), code.encode()):
                return ConsumeResult(ConsumeStatus.MISMATCH)
            del self._pending[key]
            return ConsumeResult(ConsumeStatus.OK, pending.account_id)

    def delete(self, *, purpose: CodePurpose, email: str) -> bool:
        with self._lock:
            return self._pending.pop((purpose.value, email), None) is not None
