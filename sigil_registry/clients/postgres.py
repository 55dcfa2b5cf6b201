"""
SIGIL Registry — PostgreSQL Client

Async connection pool for the authoritative store: identities, entries,
and the vote ledger. PostgreSQL is the only strong-consistency boundary in
the registry; uniqueness of identities and votes is enforced here.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import asyncpg
import structlog

from sigil_registry.errors import StoreError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sigil_registry.config import DatabaseConfig

logger = structlog.get_logger("sigil_registry.clients.postgres")


class PostgresClient:
    """
    Async PostgreSQL client with connection pooling.

    Driver and connection faults escaping a `connection()` block are
    re-raised as StoreError so callers see one internal-error class.
    Constraint violations that a caller catches inside the block (unique
    identity, unique vote) never reach that translation.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Create the connection pool."""
        self._pool = await asyncpg.create_pool(
            dsn=self._config.url,
            min_size=self._config.min_pool_size,
            max_size=self._config.max_pool_size,
            ssl="require" if self._config.ssl else None,
        )
        logger.info(
            "postgres_connected",
            min_size=self._config.min_pool_size,
            max_size=self._config.max_pool_size,
        )

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("postgres_disconnected")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("PostgreSQL client not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection for the duration of the block."""
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            logger.error("postgres_operation_failed", error=str(exc), error_type=type(exc).__name__)
            raise StoreError(f"Database error: {exc}") from exc

    async def health_check(self) -> dict[str, Any]:
        """Check connectivity."""
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return {"status": "connected"}
        except Exception as e:
            logger.error("postgres_health_check_failed", error=str(e))
            return {"status": "disconnected", "error": str(e)}
