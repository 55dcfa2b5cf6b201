"""
SIGIL Registry — Application Context

Every long-lived component, assembled once at startup and handed to the
HTTP layer through `app.state.registry`. Tests build one around in-memory
repositories and inject it into `create_app`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sigil_registry.systems.entries.kinds import PATTERN_KIND, POLICY_KIND
from sigil_registry.systems.entries.repository import EntryRepository
from sigil_registry.systems.entries.store import EntryStore, PatternStore
from sigil_registry.systems.entries.types import EntryKind, SecurityPolicy
from sigil_registry.systems.identity.cache import ResolutionCache
from sigil_registry.systems.identity.directory import IdentityDirectory
from sigil_registry.systems.identity.service import IdentityService
from sigil_registry.systems.votes.ledger import VoteLedger
from sigil_registry.systems.votes.repository import VoteRepository

if TYPE_CHECKING:
    from sigil_registry.clients.postgres import PostgresClient
    from sigil_registry.clients.redis import RedisClient
    from sigil_registry.config import SigilConfig


@dataclass
class RegistryContext:
    config: SigilConfig
    identities: IdentityService
    patterns: PatternStore
    policies: EntryStore[SecurityPolicy]
    votes: VoteLedger
    db: PostgresClient | None = None
    cache_client: RedisClient | None = None

    async def health(self) -> dict[str, Any]:
        postgres = await self.db.health_check() if self.db else {"status": "not_configured"}
        redis = await self.cache_client.health_check() if self.cache_client else {"status": "disabled"}
        return {"postgres": postgres, "redis": redis}

    async def close(self) -> None:
        if self.cache_client is not None:
            await self.cache_client.close()
        if self.db is not None:
            await self.db.close()


def assemble(
    config: SigilConfig,
    directory: IdentityDirectory,
    cache: ResolutionCache,
    pattern_repository: EntryRepository,
    policy_repository: EntryRepository,
    vote_repository: VoteRepository,
) -> RegistryContext:
    """Wire the core components from already-built storage adapters."""
    registry = config.registry
    store_options = {
        "message_prefix": registry.message_prefix,
        "default_page_size": registry.default_page_size,
        "max_page_size": registry.max_page_size,
    }
    patterns = PatternStore(pattern_repository, directory, **store_options)
    policies = EntryStore(policy_repository, directory, **store_options)
    votes = VoteLedger(
        directory,
        {EntryKind.PATTERN: patterns, EntryKind.POLICY: policies},
        vote_repository,
        message_prefix=registry.message_prefix,
    )
    return RegistryContext(
        config=config,
        identities=IdentityService(directory, cache, did_prefix=registry.did_prefix),
        patterns=patterns,
        policies=policies,
        votes=votes,
    )


def build_context(
    config: SigilConfig,
    db: PostgresClient,
    cache_client: RedisClient | None = None,
) -> RegistryContext:
    """Build the production context over a connected pool and optional Redis."""
    context = assemble(
        config,
        directory=IdentityDirectory(db),
        cache=ResolutionCache(cache_client, ttl_seconds=config.cache.ttl_seconds),
        pattern_repository=EntryRepository(db, PATTERN_KIND),
        policy_repository=EntryRepository(db, POLICY_KIND),
        vote_repository=VoteRepository(db),
    )
    context.db = db
    context.cache_client = cache_client
    return context
