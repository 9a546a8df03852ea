from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import Protocol


class TokenDenylistStore(Protocol):
    """
    Abstraction for a denylist of **access tokens**, keyed by ``jti``.

    Entries expire together with the token they revoke. Methods are idempotent.
    """

    def is_revoked(self, jti: str) -> bool: ...

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> bool:
        """
        Deny ``jti`` until ``expires_at``.

        :returns: ``False`` when the token already expired and nothing was stored.
        """
        ...


class InMemoryDenylistStore(TokenDenylistStore):
    """In-memory denylist honouring each entry's expiry."""

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            expires_at = self._revoked.get(jti)
            if expires_at is None:
                return False
            if expires_at <= datetime.now(UTC):
                del self._revoked[jti]
                return False
            return True

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> bool:
        if expires_at <= datetime.now(UTC):
            return False
        with self._lock:
            self._revoked[jti] = expires_at
        return True
