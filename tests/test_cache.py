from unittest.mock import AsyncMock

import pytest
from redis.exceptions import LockNotOwnedError

from app.core.cache import CacheService


class TestSweepLock:
    """Verify the Redis-backed advisory lock and its degraded modes."""

    @pytest.mark.asyncio
    async def test_acquire_when_free(self, mock_cache, mock_redis):
        lock = mock_redis.lock.return_value

        async with mock_cache.hold_lock("k", 60) as acquired:
            assert acquired is True
            lock.release.assert_not_awaited()

        mock_redis.lock.assert_called_once_with("k", timeout=60, blocking=False)
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_acquire_when_held(self, mock_cache, mock_redis):
        lock = mock_redis.lock.return_value
        lock.acquire.return_value = False

        async with mock_cache.hold_lock("k", 60) as acquired:
            assert acquired is False

        lock.release.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_without_redis_always_acquires(self):
        cache = CacheService(redis_client=None)

        assert cache.is_available is False
        async with cache.hold_lock("k", 60) as acquired:
            assert acquired is True

    @pytest.mark.asyncio
    async def test_redis_error_does_not_block(self, mock_cache, mock_redis):
        lock = mock_redis.lock.return_value
        lock.acquire = AsyncMock(side_effect=ConnectionError("refused"))

        async with mock_cache.hold_lock("k", 60) as acquired:
            assert acquired is True

        lock.release.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_released_when_body_raises(self, mock_cache, mock_redis):
        lock = mock_redis.lock.return_value

        with pytest.raises(RuntimeError):
            async with mock_cache.hold_lock("k", 60):
                raise RuntimeError("sweep failed")

        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expired_lock_is_not_an_error(self, mock_cache, mock_redis):
        lock = mock_redis.lock.return_value
        lock.release = AsyncMock(side_effect=LockNotOwnedError("expired"))

        async with mock_cache.hold_lock("k", 60) as acquired:
            assert acquired is True

        lock.release.assert_awaited_once()
