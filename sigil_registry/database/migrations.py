"""
Database Migrations for the SIGIL Registry

Ordered, idempotent DDL applied at startup. Applied versions are recorded
in `schema_migrations`; a transaction-scoped advisory lock keeps two
replicas starting together from racing through the same steps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable

import structlog

from sigil_registry.database.seeds import seed_official_entries

if TYPE_CHECKING:
    from asyncpg import Connection

    from sigil_registry.clients.postgres import PostgresClient

logger = structlog.get_logger("sigil_registry.database.migrations")

# Arbitrary constant shared by every registry process
_ADVISORY_LOCK_ID = 0x51_61_1D


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    sql: str | None = None
    run: Callable[[Connection], Awaitable[None]] | None = None

    async def apply(self, conn: Connection) -> None:
        if self.sql:
            await conn.execute(self.sql)
        if self.run is not None:
            await self.run(conn)


_CREATE_DIDS = """
CREATE TABLE IF NOT EXISTS dids (
    did         TEXT PRIMARY KEY,
    -- Ed25519 public key, base64url without padding (43 chars)
    public_key  TEXT NOT NULL,
    namespace   TEXT NOT NULL,
    label       TEXT,
    status      TEXT NOT NULL DEFAULT 'active'
                CHECK (status IN ('active', 'revoked')),
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    revoked_at  TIMESTAMPTZ,
    CONSTRAINT dids_revoked_at_matches_status
        CHECK ((status = 'revoked') = (revoked_at IS NOT NULL))
);

CREATE INDEX IF NOT EXISTS idx_dids_namespace ON dids (namespace);
CREATE INDEX IF NOT EXISTS idx_dids_status ON dids (status);

CREATE TABLE IF NOT EXISTS did_events (
    id          UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    did         TEXT NOT NULL REFERENCES dids (did),
    event_type  TEXT NOT NULL,  -- 'registered' | 'revoked'
    actor       TEXT,
    occurred_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    metadata    JSONB
);

CREATE INDEX IF NOT EXISTS idx_did_events_did ON did_events (did);
"""

_CREATE_ENTRIES = """
CREATE TABLE IF NOT EXISTS scanner_patterns (
    id               UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name             TEXT NOT NULL,
    description      TEXT,
    category         TEXT NOT NULL,  -- 'secret' | 'pii' | 'credential' | 'financial'
    pattern          TEXT NOT NULL,
    replacement_hint TEXT,
    severity         TEXT NOT NULL DEFAULT 'high',
    author_did       TEXT REFERENCES dids (did) ON DELETE SET NULL,
    downloads        BIGINT NOT NULL DEFAULT 0 CHECK (downloads >= 0),
    votes_up         INT NOT NULL DEFAULT 0 CHECK (votes_up >= 0),
    votes_down       INT NOT NULL DEFAULT 0 CHECK (votes_down >= 0),
    verified         BOOLEAN NOT NULL DEFAULT FALSE,
    active           BOOLEAN NOT NULL DEFAULT TRUE,
    created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at       TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_patterns_category ON scanner_patterns (category);
CREATE INDEX IF NOT EXISTS idx_patterns_verified ON scanner_patterns (verified);
CREATE INDEX IF NOT EXISTS idx_patterns_author ON scanner_patterns (author_did);
-- Names are unique among active patterns; closes the check-then-insert race
CREATE UNIQUE INDEX IF NOT EXISTS idx_patterns_name_uniq
    ON scanner_patterns (name) WHERE active = TRUE;

CREATE TABLE IF NOT EXISTS security_policies (
    id                    UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    tool_name             TEXT NOT NULL,
    risk_level            TEXT NOT NULL,  -- 'low' | 'medium' | 'high' | 'critical'
    requires_trust        TEXT NOT NULL,  -- 'Low' | 'Medium' | 'High'
    requires_confirmation BOOLEAN NOT NULL DEFAULT FALSE,
    rationale             TEXT,
    author_did            TEXT REFERENCES dids (did) ON DELETE SET NULL,
    votes_up              INT NOT NULL DEFAULT 0 CHECK (votes_up >= 0),
    votes_down            INT NOT NULL DEFAULT 0 CHECK (votes_down >= 0),
    verified              BOOLEAN NOT NULL DEFAULT FALSE,
    active                BOOLEAN NOT NULL DEFAULT TRUE,
    created_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at            TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_policies_tool ON security_policies (tool_name);
CREATE INDEX IF NOT EXISTS idx_policies_verified ON security_policies (verified);
CREATE INDEX IF NOT EXISTS idx_policies_risk ON security_policies (risk_level);
"""

_CREATE_VOTES = """
CREATE TABLE IF NOT EXISTS registry_votes (
    id          UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    voter_did   TEXT NOT NULL REFERENCES dids (did),
    target_type TEXT NOT NULL CHECK (target_type IN ('pattern', 'policy')),
    target_id   UUID NOT NULL,
    vote        TEXT NOT NULL CHECK (vote IN ('up', 'down')),
    voted_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (voter_did, target_type, target_id)
);

CREATE INDEX IF NOT EXISTS idx_votes_target ON registry_votes (target_type, target_id);
"""

MIGRATIONS: list[Migration] = [
    Migration(1, "create_dids", sql=_CREATE_DIDS),
    Migration(2, "create_entries", sql=_CREATE_ENTRIES),
    Migration(3, "create_votes", sql=_CREATE_VOTES),
    Migration(4, "seed_official_entries", run=seed_official_entries),
]


async def applied_versions(conn: Connection) -> set[int]:
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version    INT PRIMARY KEY,
            name       TEXT NOT NULL,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )
    rows = await conn.fetch("SELECT version FROM schema_migrations")
    return {row["version"] for row in rows}


async def run_migrations(db: PostgresClient, migrations: list[Migration] | None = None) -> int:
    """
    Apply every pending migration. Each runs in its own savepoint under one
    advisory-locked transaction, so a failed step leaves nothing recorded.

    Returns the number applied.
    """
    migrations = MIGRATIONS if migrations is None else migrations
    applied = 0

    async with db.connection() as conn:
        async with conn.transaction():
            await conn.execute("SELECT pg_advisory_xact_lock($1)", _ADVISORY_LOCK_ID)
            done = await applied_versions(conn)

            for migration in sorted(migrations, key=lambda m: m.version):
                if migration.version in done:
                    continue
                async with conn.transaction():
                    await migration.apply(conn)
                    await conn.execute(
                        "INSERT INTO schema_migrations (version, name) VALUES ($1, $2)",
                        migration.version,
                        migration.name,
                    )
                applied += 1
                logger.info("migration_applied", version=migration.version, name=migration.name)

    if applied == 0:
        logger.info("migrations_up_to_date", count=len(migrations))
    return applied
