"""Pytest configuration and fixtures."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import fakeredis
import httpx
import pytest

from config import Config
from shortener.background import BackgroundTaskPool
from shortener.common.logging_config import setup_logging
from shortener.database.base import AnalyticsStoreBase, URLCacheBase, URLStoreBase
from shortener.database.cache import RedisCache
from shortener.database.memory import InMemoryAnalyticsStore, InMemoryURLStore
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from web_app import create_app


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def url_store(logger):
    """In-memory URL store."""
    return InMemoryURLStore(logger=logger)


@pytest.fixture
def analytics_store(url_store, logger):
    """In-memory analytics store backed by ``url_store``."""
    return InMemoryAnalyticsStore(url_store, logger=logger)


@pytest.fixture
def mock_store():
    """Store double that accepts every insert and resolves nothing."""
    store = AsyncMock(spec=URLStoreBase)
    store.create.side_effect = lambda url: url
    store.get_by_short_code.return_value = None
    store.health_check.return_value = True
    return store


@pytest.fixture
def mock_analytics():
    return AsyncMock(spec=AnalyticsStoreBase)


@pytest.fixture
def mock_cache():
    """Cache double that always misses."""
    cache = AsyncMock(spec=URLCacheBase)
    cache.get_url.return_value = None
    cache.set_url.return_value = True
    cache.health_check.return_value = True
    return cache


@pytest.fixture
def fake_redis():
    """Async Redis client on a private in-process server."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def cache(fake_redis, logger):
    """Redis cache over an in-process fake server."""
    return RedisCache(client=fake_redis, logger=logger)


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(length=7)


@pytest.fixture
def background(logger):
    return BackgroundTaskPool(workers=2, queue_size=100, task_timeout_seconds=1.0, logger=logger)


@pytest.fixture
async def service(
    url_store, analytics_store, cache, short_code_generator, background, logger
) -> AsyncGenerator[URLShortenerService, None]:
    """Service over in-memory stores and a fake Redis cache."""
    svc = URLShortenerService(
        store=url_store,
        analytics=analytics_store,
        cache=cache,
        short_code_generator=short_code_generator,
        background=background,
        logger=logger,
    )
    yield svc
    await svc.close(timeout=1.0)


@pytest.fixture
def config():
    return Config(
        _env_file=None,
        database_url="memory://",
        base_url="http://short.test",
    )


@pytest.fixture
def app(service, config, logger):
    return create_app(service=service, config=config, logger=logger)


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client calling the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
