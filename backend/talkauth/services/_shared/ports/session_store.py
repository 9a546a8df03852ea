from __future__ import annotations

import hashlib
import hmac
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum, auto
from typing import Protocol


def digest_token(token: str) -> str:
    """SHA-256 hex digest of a refresh token; the raw token is never stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RotationResult(Enum):
    """Outcome of an atomic refresh rotation attempt."""

    OK = auto()
    NOT_FOUND = auto()
    MISMATCH = auto()


@dataclass(frozen=True)
class SessionRecordView:
    """
    Read-model for the live session of one subject.

    :ivar subject_id: Account id owning the session.
    :ivar token_digest: Digest of the only refresh token currently accepted.
    :ivar roles: Role authorities the session was issued with.
    :ivar issued_at: When the current refresh token was recorded (UTC).
    """

    subject_id: str
    token_digest: str
    roles: tuple[str, ...]
    issued_at: datetime


class SessionStore(Protocol):
    """
    Expiring store holding at most one refresh session per subject.

    ``save`` overwrites and ``rotate`` compare-and-sets; both MUST be atomic.
    """

    def save(
        self, *, subject_id: str, refresh_token: str, roles: Iterable[str], ttl: timedelta
    ) -> None:
        """Record ``refresh_token`` as the subject's only valid one, replacing any other."""
        ...

    def get(self, subject_id: str) -> SessionRecordView | None: ...

    def rotate(
        self,
        *,
        subject_id: str,
        presented_token: str,
        new_token: str,
        roles: Iterable[str],
        ttl: timedelta,
    ) -> RotationResult:
        """
        Replace ``presented_token`` with ``new_token`` iff it is the current one.

        :returns: ``RotationResult.OK`` on success, otherwise the failure.
        """
        ...

    def delete(self, subject_id: str) -> bool:
        """Drop the session. :returns: True if one existed."""
        ...


@dataclass(frozen=True)
class _Entry:
    view: SessionRecordView
    expires_at: datetime


class InMemorySessionStore(SessionStore):
    """
    In-memory session store with TTL and atomic rotation.

    .. note::
       Uses a threading lock to simulate atomicity in unit tests.
    """

    def __init__(self) -> None:
        self._by_subject: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def _live(self, subject_id: str) -> _Entry | None:
        entry = self._by_subject.get(subject_id)
        if entry is None:
            return None
        if entry.expires_at <= self._now():
            del self._by_subject[subject_id]
            return None
        return entry

    def _put(self, subject_id: str, token: str, roles: Iterable[str], ttl: timedelta) -> None:
        now = self._now()
        self._by_subject[subject_id] = _Entry(
            view=SessionRecordView(
                subject_id=subject_id,
                token_digest=digest_token(token),
                roles=tuple(roles),
                issued_at=now,
            ),
            expires_at=now + ttl,
        )

    def save(
        self, *, subject_id: str, refresh_token: str, roles: Iterable[str], ttl: timedelta
    ) -> None:
        with self._lock:
            self._put(subject_id, refresh_token, roles, ttl)

    def get(self, subject_id: str) -> SessionRecordView | None:
        with self._lock:
            entry = self._live(subject_id)
            return entry.view if entry else None

    def rotate(
        self,
        *,
        subject_id: str,
        presented_token: str,
        new_token: str,
        roles: Iterable[str],
        ttl: timedelta,
    ) -> RotationResult:
        with self._lock:
            entry = self._live(subject_id)
            if entry is None:
                return RotationResult.NOT_FOUND
            if not hmac.compare_digest(entry.view.token_digest, digest_token(presented_token)):
                return RotationResult.MISMATCH
            self._put(subject_id, new_token, roles, ttl)
            return RotationResult.OK

    def delete(self, subject_id: str) -> bool:
        with self._lock:
            return self._by_subject.pop(subject_id, None) is not None
