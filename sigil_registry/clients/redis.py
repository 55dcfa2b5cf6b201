"""
SIGIL Registry — Redis Client

Async Redis used only as an accelerator for DID resolution. The registry
runs correctly without it; callers treat every failure here as a miss.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson
import structlog
from redis.asyncio import Redis

if TYPE_CHECKING:
    from sigil_registry.config import CacheConfig

logger = structlog.get_logger("sigil_registry.clients.redis")


class RedisClient:
    """
    Async Redis client with optional key prefixing.
    """

    def __init__(self, config: CacheConfig) -> None:
        self._config = config
        self._client: Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        self._client = Redis.from_url(
            self._config.url,
            decode_responses=True,
            socket_timeout=self._config.socket_timeout_seconds,
            socket_connect_timeout=self._config.socket_timeout_seconds,
        )
        # Verify connectivity
        await self._client.ping()
        logger.info("redis_connected", prefix=self._config.prefix or None)

    async def close(self) -> None:
        """Close the connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("redis_disconnected")

    @property
    def client(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self._client

    def _key(self, key: str) -> str:
        if not self._config.prefix:
            return key
        return f"{self._config.prefix}:{key}"

    async def health_check(self) -> dict[str, Any]:
        """Check connectivity."""
        try:
            await self.client.ping()
            return {"status": "connected"}
        except Exception as e:
            logger.error("redis_health_check_failed", error=str(e))
            return {"status": "disconnected", "error": str(e)}

    async def get(self, key: str) -> str | None:
        """Read a raw value. Decoding is left to the caller."""
        return await self.client.get(self._key(key))

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a JSON-serialisable value."""
        raw = orjson.dumps(value).decode()
        if ttl:
            await self.client.setex(self._key(key), ttl, raw)
        else:
            await self.client.set(self._key(key), raw)

    async def delete(self, key: str) -> None:
        """Delete a key."""
        await self.client.delete(self._key(key))


async def connect_cache(config: CacheConfig) -> RedisClient | None:
    """
    Connect the optional DID cache.

    Returns None when no URL is configured or the server is unreachable;
    the registry then serves every resolution from PostgreSQL.
    """
    if not config.enabled:
        logger.info("redis_url_not_set", note="DID cache disabled")
        return None

    client = RedisClient(config)
    try:
        await client.connect()
    except Exception as exc:
        logger.warning("redis_connect_failed", error=str(exc), note="DID cache disabled")
        await client.close()
        return None
    return client
