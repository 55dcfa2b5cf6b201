"""
SIGIL Registry — DID Resolution Cache

Cache-aside copy of active identity records, keyed "did:{did}". The cache
is optional and untrusted for correctness: every Redis failure degrades to
a miss, a skipped write or a skipped delete. Revoked records are never
written, and revocation deletes the key explicitly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
import structlog
from pydantic import ValidationError

from sigil_registry.systems.identity.types import IdentityRecord

if TYPE_CHECKING:
    from sigil_registry.clients.redis import RedisClient

logger = structlog.get_logger("sigil_registry.identity.cache")

DEFAULT_TTL_SECONDS = 300


def cache_key(did: str) -> str:
    return f"did:{did}"


class ResolutionCache:
    """Wraps an optional RedisClient; `client=None` means caching is off."""

    def __init__(self, client: RedisClient | None, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._client = client
        self._ttl = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def get(self, did: str) -> IdentityRecord | None:
        if self._client is None:
            return None
        try:
            raw = await self._client.get(cache_key(did))
        except Exception as exc:
            logger.warning("did_cache_read_failed", did=did, error=str(exc))
            return None
        if raw is None:
            logger.debug("did_cache_miss", did=did)
            return None
        try:
            record = IdentityRecord.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValidationError) as exc:
            logger.warning("did_cache_corrupt", did=did, error=str(exc))
            return None
        logger.debug("did_cache_hit", did=did)
        return record

    async def put(self, record: IdentityRecord) -> bool:
        """Cache an active record. Returns True when a value was written."""
        if self._client is None or not record.is_active:
            return False
        try:
            await self._client.set_json(
                cache_key(record.did), record.model_dump(mode="json"), ttl=self._ttl
            )
        except Exception as exc:
            logger.warning("did_cache_write_failed", did=record.did, error=str(exc))
            return False
        return True

    async def invalidate(self, did: str) -> None:
        if self._client is None:
            return
        try:
            await self._client.delete(cache_key(did))
        except Exception as exc:
            # The stale entry lives at most one TTL
            logger.warning("did_cache_invalidate_failed", did=did, error=str(exc))
