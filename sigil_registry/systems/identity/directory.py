"""
SIGIL Registry — Identity Directory

The authoritative table of DIDs. Registration relies on the primary key for
uniqueness; revocation is a conditional update so that concurrent revokes
race safely (exactly one sees a row change). Every lifecycle change appends
a did_events row in the same transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncpg
import structlog

from sigil_registry.errors import Conflict, NotFound
from sigil_registry.systems.identity.types import IdentityRecord, PublicKeyRecord

if TYPE_CHECKING:
    from sigil_registry.clients.postgres import PostgresClient

logger = structlog.get_logger("sigil_registry.identity.directory")

_COLUMNS = "did, public_key, namespace, label, status, created_at, updated_at, revoked_at"


class IdentityDirectory:
    """PostgreSQL-backed store of identity records."""

    def __init__(self, db: PostgresClient) -> None:
        self._db = db

    async def fetch(self, did: str) -> IdentityRecord | None:
        """Any status. Used by resolution, which reports revoked DIDs too."""
        async with self._db.connection() as conn:
            row = await conn.fetchrow(f"SELECT {_COLUMNS} FROM dids WHERE did = $1", did)
        return IdentityRecord.model_validate(dict(row)) if row else None

    async def lookup_active(self, did: str) -> PublicKeyRecord | None:
        async with self._db.connection() as conn:
            public_key = await conn.fetchval(
                "SELECT public_key FROM dids WHERE did = $1 AND status = 'active'",
                did,
            )
        if public_key is None:
            return None
        return PublicKeyRecord(did=did, public_key=public_key)

    async def register(
        self,
        did: str,
        public_key: str,
        namespace: str,
        label: str | None = None,
        actor: str | None = None,
    ) -> IdentityRecord:
        """Insert a new active DID. Raises Conflict if the string was ever used."""
        async with self._db.connection() as conn:
            async with conn.transaction():
                try:
                    row = await conn.fetchrow(
                        f"""
                        INSERT INTO dids (did, public_key, namespace, label, status)
                        VALUES ($1, $2, $3, $4, 'active')
                        RETURNING {_COLUMNS}
                        """,
                        did,
                        public_key,
                        namespace,
                        label,
                    )
                except asyncpg.UniqueViolationError as exc:
                    raise Conflict(f"DID already registered: {did}") from exc
                await conn.execute(
                    "INSERT INTO did_events (did, event_type, actor) VALUES ($1, 'registered', $2)",
                    did,
                    actor,
                )
        return IdentityRecord.model_validate(dict(row))

    async def revoke(self, did: str, actor: str | None = None) -> IdentityRecord:
        """
        Flip an active DID to revoked.

        Raises NotFound when the DID does not exist or is already revoked;
        revoking twice is never reported as success.
        """
        async with self._db.connection() as conn:
            async with conn.transaction():
                row = await conn.fetchrow(
                    f"""
                    UPDATE dids
                    SET status = 'revoked', revoked_at = NOW(), updated_at = NOW()
                    WHERE did = $1 AND status = 'active'
                    RETURNING {_COLUMNS}
                    """,
                    did,
                )
                if row is None:
                    raise NotFound(f"DID not found or already revoked: {did}")
                await conn.execute(
                    "INSERT INTO did_events (did, event_type, actor) VALUES ($1, 'revoked', $2)",
                    did,
                    actor,
                )
        return IdentityRecord.model_validate(dict(row))
