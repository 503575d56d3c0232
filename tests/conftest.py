from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

if TYPE_CHECKING:
    from app.core.cache import CacheService

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import app


@asynccontextmanager
async def _savepoint():
    yield


def make_repo(repo_cls) -> AsyncMock:
    """Return an ``AsyncMock`` shaped like *repo_cls*.

    ``savepoint()`` yields a no-op async context manager so that code
    running steps inside ``async with repo.savepoint():`` behaves as it
    would against a real session.
    """
    repo = AsyncMock(spec=repo_cls)
    repo.savepoint = MagicMock(side_effect=lambda: _savepoint())
    return repo


@pytest.fixture
def repo_factory() -> Callable[[type], AsyncMock]:
    return make_repo


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Return an ``AsyncMock`` that behaves like ``redis.asyncio.Redis``."""
    redis = AsyncMock()
    redis.ping = AsyncMock()

    # ``Redis.lock`` is synchronous and returns an async ``Lock``
    lock = AsyncMock()
    lock.acquire = AsyncMock(return_value=True)
    lock.release = AsyncMock()
    redis.lock = MagicMock(return_value=lock)
    return redis


@pytest.fixture
def mock_cache(mock_redis) -> "CacheService":
    """Return a ``CacheService`` backed by the mock Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=mock_redis)


@pytest.fixture
def session_factory() -> MagicMock:
    """Return a callable mimicking ``AsyncSessionLocal``.

    ``session_factory.session`` is the ``AsyncMock`` session it yields.
    """
    session = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    session.commit = AsyncMock()

    factory = MagicMock(return_value=session)
    factory.session = session
    return factory
