from __future__ import annotations

import hmac
from dataclasses import dataclass
from datetime import timedelta

import redis  # type: ignore[import-untyped]

from talkauth.infra.redis._errors import store_errors
from talkauth.services._shared.ports import (
    CodePurpose,
    ConsumeResult,
    ConsumeStatus,
    VerificationCodeStore,
)


@dataclass(slots=True)
class RedisVerificationCodeStore(VerificationCodeStore):
    """
    Single-use codes in ``verify:{purpose}:{email}`` hashes with a short TTL.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    @staticmethod
    def _k(purpose: CodePurpose, email: str) -> str:
        return f"verify:{purpose.value}:{email}"

    def save(
        self,
        *,
        purpose: CodePurpose,
        email: str,
        code: str,
        ttl: timedelta,
        account_id: str | None = None,
    ) -> None:
        key = self._k(purpose, email)
        mapping = {"code": code}
        if account_id is not None:
            mapping["account_id"] = account_id
        with store_errors("code.save"):
            pipe = self.r.pipeline(transaction=True)
            pipe.delete(key)
            pipe.hset(key, mapping=mapping)
            pipe.expire(key, max(1, int(ttl.total_seconds())))
            pipe.execute()

    def consume(self, *, purpose: CodePurpose, email: str, code: str) -> ConsumeResult:
        """
        Delete the entry iff ``code`` matches, under WATCH so a code re-issued
        mid-check is never consumed by the old one.
        """
        key = self._k(purpose, email)
        with store_errors("code.consume"):
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        stored = p.hgetall(key)
                        if not stored:
                            p.unwatch()
                            return ConsumeResult(ConsumeStatus.NOT_FOUND)
                        if not hmac.compare_digest(stored.get(b"code", b""), code.encode()):
                            p.unwatch()
                            return ConsumeResult(ConsumeStatus.MISMATCH)

                        p.multi()
                        p.delete(key)
                        p.execute()
                    account = stored.get(b"account_id")
                    return ConsumeResult(
                        ConsumeStatus.OK, account.decode() if account is not None else None
                    )
                except redis.WatchError:
                    continue

    def delete(self, *, purpose: CodePurpose, email: str) -> bool:
        with store_errors("code.delete"):
            return bool(self.r.delete(self._k(purpose, email)))
