"""Redis cache of extraction results keyed by article URL."""

from __future__ import annotations

import hashlib
import logging

import redis.asyncio as redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from src.api.schemas import ScrapedContent

logger = logging.getLogger(__name__)

KEY_PREFIX = "scrape:"


def cache_key(url: str) -> str:
    """Stable key for *url*; hashed so arbitrary URLs stay short and safe."""
    digest = hashlib.sha256(url.strip().encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}{digest}"


class ScrapeCache:
    """Thin async wrapper around Redis for caching ``ScrapedContent``."""

    def __init__(self, client: redis.Redis, default_ttl: int = 86400) -> None:
        self._client = client
        self._default_ttl = default_ttl

    async def get(self, url: str) -> ScrapedContent | None:
        """Return the cached extraction, or ``None`` on miss / error."""
        try:
            raw = await self._client.get(cache_key(url))
            if raw is None:
                logger.debug("cache miss", extra={"url": url})
                return None
            logger.debug("cache hit", extra={"url": url})
            return ScrapedContent.model_validate_json(raw)
        except redis.RedisError:
            logger.warning("cache get failed", extra={"url": url}, exc_info=True)
            return None

    async def set(self, content: ScrapedContent, ttl: int | None = None) -> bool:
        """Store *content* under its own ``url``. Returns ``False`` on error."""
        effective_ttl = ttl if ttl is not None else self._default_ttl
        try:
            await self._client.set(
                cache_key(content.url),
                content.model_dump_json(),
                ex=effective_ttl,
            )
            logger.debug("cache set", extra={"url": content.url, "ttl": effective_ttl})
            return True
        except redis.RedisError:
            logger.warning("cache set failed", extra={"url": content.url}, exc_info=True)
            return False


async def create_redis_client(redis_url: str) -> redis.Redis:
    # Strip credentials for logging (everything before @ if present)
    safe_url = redis_url.split("@")[-1] if "@" in redis_url else redis_url
    logger.info("connecting to redis", extra={"redis_url": safe_url})
    retry = Retry(ExponentialBackoff(), retries=3)
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
        retry=retry,
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )
