"""Fixtures: settings, mock Redis, fake render backend."""

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from src.cache.redis import ScrapeCache
from src.config import Settings
from tests.fakes import FakeBackend, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def redis_cache():
    """ScrapeCache backed by an in-memory FakeRedis instance."""
    client = FakeRedis(decode_responses=True)
    cache = ScrapeCache(client, default_ttl=3600)
    yield cache
    await client.aclose()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()
