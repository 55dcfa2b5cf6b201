"""
SIGIL Registry — Vote Repository

The ledger table `registry_votes` carries UNIQUE(voter_did, target_type,
target_id). Recording a vote inserts with ON CONFLICT DO NOTHING and, only
when a row was written, bumps the matching tally column, both inside one
transaction. Tallies therefore always equal the ledger counts.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from sigil_registry.clients.postgres import PostgresClient
    from sigil_registry.systems.entries.kinds import EntryKindSpec
    from sigil_registry.systems.votes.types import VoteDirection


class VoteRepository:
    def __init__(self, db: PostgresClient) -> None:
        self._db = db

    async def record(
        self,
        spec: EntryKindSpec,
        target_id: UUID,
        direction: VoteDirection,
        voter_did: str,
    ) -> datetime | None:
        """
        Write a ledger row and bump the tally.

        Returns the ledger timestamp, or None when the voter already has a
        row for this target (nothing changed).
        """
        column = direction.tally_column
        async with self._db.connection() as conn:
            async with conn.transaction():
                voted_at = await conn.fetchval(
                    """
                    INSERT INTO registry_votes (voter_did, target_type, target_id, vote)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (voter_did, target_type, target_id) DO NOTHING
                    RETURNING voted_at
                    """,
                    voter_did,
                    spec.kind.value,
                    target_id,
                    direction.value,
                )
                if voted_at is None:
                    return None
                await conn.execute(
                    f"UPDATE {spec.table} SET {column} = {column} + 1, updated_at = NOW() "
                    "WHERE id = $1",
                    target_id,
                )
        return voted_at

    async def reconcile(self, spec: EntryKindSpec) -> int:
        """Recompute every tally of a kind from the ledger. Returns rows corrected."""
        async with self._db.connection() as conn:
            status = await conn.execute(
                f"""
                UPDATE {spec.table} AS e
                SET votes_up = c.up, votes_down = c.down, updated_at = NOW()
                FROM (
                    SELECT t.id,
                           COUNT(v.id) FILTER (WHERE v.vote = 'up')   AS up,
                           COUNT(v.id) FILTER (WHERE v.vote = 'down') AS down
                    FROM {spec.table} AS t
                    LEFT JOIN registry_votes AS v
                      ON v.target_type = $1 AND v.target_id = t.id
                    GROUP BY t.id
                ) AS c
                WHERE e.id = c.id
                  AND (e.votes_up <> c.up OR e.votes_down <> c.down)
                """,
                spec.kind.value,
            )
        # Command tag is "UPDATE <n>"
        return int(status.split()[-1])
