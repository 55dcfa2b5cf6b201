"""
SIGIL Registry — Entry Repository

SQL for one entry kind. The EntryKindSpec supplies table and column names;
every value travels as a bind parameter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

import asyncpg

from sigil_registry.errors import Duplicate
from sigil_registry.systems.entries.types import BundleEntry, Entry

if TYPE_CHECKING:
    from sigil_registry.clients.postgres import PostgresClient
    from sigil_registry.primitives.common import RegistryBaseModel
    from sigil_registry.systems.entries.kinds import EntryKindSpec


class EntryRepository:
    def __init__(self, db: PostgresClient, spec: EntryKindSpec) -> None:
        self._db = db
        self._spec = spec

    @property
    def spec(self) -> EntryKindSpec:
        return self._spec

    async def is_taken(self, value: str) -> bool:
        """Whether an active entry already holds `value` in the unique field."""
        spec = self._spec
        if spec.unique_field is None:
            return False
        async with self._db.connection() as conn:
            return bool(
                await conn.fetchval(
                    f"SELECT EXISTS(SELECT 1 FROM {spec.table} "
                    f"WHERE {spec.unique_field} = $1 AND active = TRUE)",
                    value,
                )
            )

    async def insert(self, submission: RegistryBaseModel, author_did: str) -> UUID:
        spec = self._spec
        values = [getattr(submission, column) for column in spec.content_columns]
        columns = (*spec.content_columns, "author_did")
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))

        async with self._db.connection() as conn:
            try:
                return await conn.fetchval(
                    f"INSERT INTO {spec.table} ({', '.join(columns)}) "
                    f"VALUES ({placeholders}) RETURNING id",
                    *values,
                    author_did,
                )
            except asyncpg.UniqueViolationError as exc:
                # Lost the race against a concurrent submission of the same name
                value = getattr(submission, spec.unique_field or "", "")
                raise Duplicate(f"{spec.label} '{value}' already exists") from exc

    async def list(self, filters: dict[str, Any], offset: int, limit: int) -> list[Entry]:
        spec = self._spec
        clauses = ["active = TRUE"]
        args: list[Any] = []
        for name, value in filters.items():
            if value is None:
                continue
            args.append(value)
            clauses.append(f"{spec.filters[name]} = ${len(args)}")
        args.extend([limit, offset])

        sql = (
            f"SELECT {spec.select_columns} FROM {spec.table} "
            f"WHERE {' AND '.join(clauses)} "
            f"ORDER BY {spec.order_by} "
            f"LIMIT ${len(args) - 1} OFFSET ${len(args)}"
        )
        async with self._db.connection() as conn:
            rows = await conn.fetch(sql, *args)
        return [spec.model.model_validate(dict(row)) for row in rows]

    async def get(self, entry_id: UUID) -> Entry | None:
        spec = self._spec
        async with self._db.connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {spec.select_columns} FROM {spec.table} WHERE id = $1 AND active = TRUE",
                entry_id,
            )
        return spec.model.model_validate(dict(row)) if row else None

    async def exists_active(self, entry_id: UUID) -> bool:
        async with self._db.connection() as conn:
            return bool(
                await conn.fetchval(
                    f"SELECT EXISTS(SELECT 1 FROM {self._spec.table} "
                    "WHERE id = $1 AND active = TRUE)",
                    entry_id,
                )
            )

    async def bundle(self) -> list[BundleEntry]:
        """
        Count a download for every active verified pattern and return them.

        One statement, so the returned set and the incremented set are the
        same rows.
        """
        async with self._db.connection() as conn:
            rows = await conn.fetch(
                f"""
                UPDATE {self._spec.table}
                SET downloads = downloads + 1
                WHERE active = TRUE AND verified = TRUE
                RETURNING name, category, pattern, severity, replacement_hint
                """
            )
        entries = [BundleEntry.model_validate(dict(row)) for row in rows]
        entries.sort(key=lambda e: (e.category, e.name))
        return entries
