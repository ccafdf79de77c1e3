import json
import logging
from typing import Any

from redis import asyncio as aioredis
from redis.exceptions import ConnectionError, RedisError

from quickwallet.configuration.config import settings

logger = logging.getLogger(__name__)


class RedisService:
    """Async JSON cache on top of Redis. Every call degrades to a no-op when Redis is unreachable."""

    def __init__(self, url: str | None = None, ttl: int | None = None):
        self.url = url if url is not None else settings.REDIS_URL
        self.ttl = ttl or settings.REDIS_TTL
        self.client: aioredis.Redis | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def _ensure_connection(self):
        """Connects lazily and verifies the connection is alive"""
        if not self.enabled:
            return
        if self.client is None:
            self.client = aioredis.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        try:
            await self.client.ping()
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Could not connect to Redis: {str(e)}. Continuing without it.")
            await self.close()

    async def get(self, key: str) -> dict[str, Any] | None:
        try:
            await self._ensure_connection()
            if self.client is None:
                return None

            value = await self.client.get(key)
            if value is None:
                return None

            return json.loads(value)
        except (ConnectionError, RedisError, json.JSONDecodeError) as e:
            logger.warning(f"Error reading from Redis (key={key}): {str(e)}")
            return None

    async def set(self, key: str, value: dict[str, Any], ttl: int | None = None) -> bool:
        try:
            await self._ensure_connection()
            if self.client is None:
                return False

            json_value = json.dumps(value, ensure_ascii=False)
            await self.client.setex(key, ttl or self.ttl, json_value)
            return True
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Error writing to Redis (key={key}): {str(e)}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            await self._ensure_connection()
            if self.client is None:
                return False

            await self.client.delete(key)
            return True
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Error deleting from Redis (key={key}): {str(e)}")
            return False

    async def close(self):
        if self.client is not None:
            try:
                await self.client.aclose()
                logger.info("Redis connection closed")
            except RedisError as e:
                logger.error(f"Error closing Redis connection: {str(e)}")
            finally:
                self.client = None


_redis_service: RedisService | None = None


def get_redis_service() -> RedisService:
    global _redis_service  # noqa: PLW0603
    if _redis_service is None:
        _redis_service = RedisService()
    return _redis_service
