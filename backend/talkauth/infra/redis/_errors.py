from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from redis.exceptions import ConnectionError as RedisConnectionError  # type: ignore[import-untyped]
from redis.exceptions import TimeoutError as RedisTimeoutError  # type: ignore[import-untyped]

from talkauth.services._shared.errors import StoreUnavailableError

log = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """
    Re-raise Redis connectivity failures as :class:`StoreUnavailableError`.

    Other Redis errors (``WatchError``, ``ResponseError``) pass through untouched.

    :param operation: Short label for the log line (e.g. ``"session.rotate"``).
    :type operation: str
    """
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as exc:
        log.error("Session store unreachable during %s", operation, exc_info=True)
        raise StoreUnavailableError() from exc
