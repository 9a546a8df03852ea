from __future__ import annotations

import hmac
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import redis  # type: ignore[import-untyped]

from talkauth.infra.redis._errors import store_errors
from talkauth.services._shared.ports import (
    RotationResult,
    SessionRecordView,
    SessionStore,
    digest_token,
)


def _b(value: bytes | None, default: str = "") -> str:
    return value.decode() if value is not None else default


@dataclass(slots=True)
class RedisSessionStore(SessionStore):
    """
    Redis-backed session store: one hash per subject, TTL = refresh lifetime.

    Layout of ``session:{subject_id}``::

        digest     sha256 of the current refresh token
        roles      comma-separated role authorities
        issued_at  epoch seconds

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(subject_id: str) -> str:
        return f"session:{subject_id}"

    @staticmethod
    def _ttl_seconds(ttl: timedelta) -> int:
        return max(1, int(ttl.total_seconds()))

    def _write(self, pipe, key: str, token: str, roles: Iterable[str], ttl: timedelta) -> None:
        pipe.delete(key)
        pipe.hset(
            key,
            mapping={
                "digest": digest_token(token),
                "roles": ",".join(roles),
                "issued_at": str(int(datetime.now(UTC).timestamp())),
            },
        )
        pipe.expire(key, self._ttl_seconds(ttl))

    # -------------------- API ------------------------

    def save(
        self, *, subject_id: str, refresh_token: str, roles: Iterable[str], ttl: timedelta
    ) -> None:
        """Overwrite the subject's session in one MULTI/EXEC block."""
        with store_errors("session.save"):
            pipe = self.r.pipeline(transaction=True)
            self._write(pipe, self._k(subject_id), refresh_token, roles, ttl)
            pipe.execute()

    def get(self, subject_id: str) -> SessionRecordView | None:
        with store_errors("session.get"):
            h = self.r.hgetall(self._k(subject_id))
        if not h:
            return None
        roles = _b(h.get(b"roles"))
        return SessionRecordView(
            subject_id=subject_id,
            token_digest=_b(h.get(b"digest")),
            roles=tuple(r for r in roles.split(",") if r),
            issued_at=datetime.fromtimestamp(int(_b(h.get(b"issued_at"), "0")), tz=UTC),
        )

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
        Compare-and-set the refresh digest with WATCH/MULTI/EXEC.

        Two concurrent refreshes presenting the same token race on the watched
        key: the loser retries, sees the winner's digest and gets ``MISMATCH``.
        """
        key = self._k(subject_id)
        presented = digest_token(presented_token)
        roles = tuple(roles)

        with store_errors("session.rotate"):
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        current = p.hget(key, "digest")
                        if current is None:
                            p.unwatch()
                            return RotationResult.NOT_FOUND
                        if not hmac.compare_digest(current.decode(), presented):
                            p.unwatch()
                            return RotationResult.MISMATCH

                        p.multi()
                        self._write(p, key, new_token, roles, ttl)
                        p.execute()
                    return RotationResult.OK
                except redis.WatchError:
                    # Concurrent modification detected; re-read and decide again
                    continue

    def delete(self, subject_id: str) -> bool:
        with store_errors("session.delete"):
            return bool(self.r.delete(self._k(subject_id)))
