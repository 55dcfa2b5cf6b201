"""
SIGIL Registry — Identity Service

Registration, resolution and revocation of DIDs.

Resolution is cache-aside: a cache hit is served directly, a miss reads the
directory and caches the record only while it is active. Revocation writes
the directory first and then deletes the cache key. A resolve that fills
the cache re-reads the directory afterwards and drops its own write if the
identity was revoked meanwhile, so after revoke returns no resolution
reports the old active record except through a failed delete (bounded by
the TTL).

Author and voter lookups elsewhere go to the directory, never to this cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sigil_registry.crypto.codec import CodecError, decode_fixed
from sigil_registry.crypto.signatures import PUBLIC_KEY_LENGTH
from sigil_registry.errors import NotFound, ValidationFailed

if TYPE_CHECKING:
    from sigil_registry.systems.identity.cache import ResolutionCache
    from sigil_registry.systems.identity.directory import IdentityDirectory
    from sigil_registry.systems.identity.types import IdentityRecord

logger = structlog.get_logger("sigil_registry.identity")


class IdentityService:
    def __init__(
        self,
        directory: IdentityDirectory,
        cache: ResolutionCache,
        did_prefix: str = "did:sigil:",
    ) -> None:
        self._directory = directory
        self._cache = cache
        self._did_prefix = did_prefix

    @property
    def directory(self) -> IdentityDirectory:
        return self._directory

    async def register(
        self,
        did: str,
        public_key: str,
        namespace: str,
        label: str | None = None,
        actor: str | None = None,
    ) -> IdentityRecord:
        if not did.startswith(self._did_prefix) or len(did) == len(self._did_prefix):
            raise ValidationFailed(f"DID must start with '{self._did_prefix}'")
        if not namespace.strip():
            raise ValidationFailed("namespace must not be empty")
        try:
            decode_fixed(public_key, PUBLIC_KEY_LENGTH, "public key")
        except CodecError as exc:
            raise ValidationFailed(f"Invalid public key: {exc}") from exc

        record = await self._directory.register(did, public_key, namespace, label, actor=actor)
        logger.info("did_registered", did=did, namespace=namespace)
        return record

    async def resolve(self, did: str) -> IdentityRecord:
        cached = await self._cache.get(did)
        if cached is not None:
            return cached

        record = await self._directory.fetch(did)
        if record is None:
            raise NotFound(f"DID not found: {did}")

        if await self._cache.put(record):
            # A revoke may have deleted the key between our read and our write
            current = await self._directory.fetch(did)
            if current is None or not current.is_active:
                await self._cache.invalidate(did)
                logger.info("did_cache_fill_discarded", did=did)
                return current or record
        return record

    async def revoke(self, did: str, actor: str | None = None) -> IdentityRecord:
        record = await self._directory.revoke(did, actor=actor)
        await self._cache.invalidate(did)
        logger.info("did_revoked", did=did)
        return record
