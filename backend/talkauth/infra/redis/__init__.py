from .redis_denylist_store import RedisTokenDenylistStore
from .redis_session_store import RedisSessionStore
from .redis_verification_code_store import RedisVerificationCodeStore

__all__ = ["RedisSessionStore", "RedisTokenDenylistStore", "RedisVerificationCodeStore"]
