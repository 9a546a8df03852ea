from __future__ import annotations

from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from talkauth.infra.redis._errors import store_errors

REVOKED_MARKER = "blacklisted"


class RedisTokenDenylistStore:
    """
    Denylist for **access tokens** by jti.

    Each entry lives exactly as long as the token it revokes (millisecond TTL).
    """

    def __init__(self, r: redis.Redis):
        self.r = r

    @staticmethod
    def _k(jti: str) -> str:
        return f"deny:at:{jti}"

    def is_revoked(self, jti: str) -> bool:
        with store_errors("denylist.check"):
            return cast(int, self.r.exists(self._k(jti))) == 1

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> bool:
        remaining_ms = int((expires_at - datetime.now(UTC)).total_seconds() * 1000)
        if remaining_ms <= 0:
            # Already dead; an entry would only outlive the token
            return False
        with store_errors("denylist.revoke"):
            self.r.set(self._k(jti), REVOKED_MARKER, px=remaining_ms)
        return True
