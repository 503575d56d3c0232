import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis.asyncio import Redis
from redis.exceptions import LockNotOwnedError

logger = logging.getLogger(__name__)


class CacheService:
    """Thin wrapper around an async Redis client.

    If *redis_client* is ``None`` (Redis unavailable), every operation
    degrades gracefully; callers never need to check for ``None``.
    """

    def __init__(self, redis_client: Optional[Redis] = None) -> None:
        self._redis: Optional[Redis] = redis_client

    # ------------------------------------------------------------------
    # Advisory lock for single-instance sweeps
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def hold_lock(self, key: str, ttl: int) -> AsyncIterator[bool]:
        """Hold the Redis lock *key* for at most *ttl* seconds.

        Yields ``True`` when this caller holds the lock **or** when Redis
        is unavailable, so that a Redis outage never blocks the caller.
        Yields ``False`` only when another owner currently holds it.

        Uses redis-py's ``Lock``: the token check and delete on release
        run as one Lua script, so an expired lock that someone else has
        since taken is never released by us.
        """
        if self._redis is None:
            yield True
            return

        lock = self._redis.lock(key, timeout=ttl, blocking=False)
        try:
            acquired = await lock.acquire()
        except Exception:
            logger.warning("Redis lock acquire failed for %s", key)
            acquired = None

        if acquired is None:
            yield True
            return
        if not acquired:
            yield False
            return

        try:
            yield True
        finally:
            try:
                await lock.release()
            except LockNotOwnedError:
                logger.warning("Lock %s expired before release", key)
            except Exception:
                logger.warning("Redis lock release failed for %s", key)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_available(self) -> bool:
        """Return ``True`` if a Redis client is configured."""
        return self._redis is not None
