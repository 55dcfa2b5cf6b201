"""
Shared fixtures for the registry test suite.

The PostgreSQL-backed directory and repositories are replaced by in-memory
stand-ins that enforce the same constraints the schema does: DID primary
key, conditional revoke, unique active pattern names, one ledger row per
(voter, kind, target). Each mutation completes without yielding to the
event loop, which is what makes it atomic under asyncio.gather.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from uuid import UUID, uuid4

import orjson
import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from sigil_registry.config import SigilConfig
from sigil_registry.context import RegistryContext, assemble
from sigil_registry.crypto.signatures import encode_public_key, sign_message
from sigil_registry.errors import Conflict, Duplicate, NotFound
from sigil_registry.primitives.common import utc_now
from sigil_registry.systems.entries.kinds import PATTERN_KIND, POLICY_KIND, EntryKindSpec
from sigil_registry.systems.entries.types import BundleEntry, EntryKind
from sigil_registry.systems.identity.cache import ResolutionCache
from sigil_registry.systems.identity.types import IdentityRecord, IdentityStatus, PublicKeyRecord


# ─── Signers ──────────────────────────────────────────────────────


@dataclass
class Signer:
    did: str
    private_key: Ed25519PrivateKey

    @property
    def public_key(self) -> str:
        return encode_public_key(self.private_key.public_key())

    def sign(self, message: str) -> str:
        return sign_message(self.private_key, message)


@pytest.fixture
def make_signer():
    def _make(did: str = "did:sigil:alice") -> Signer:
        return Signer(did=did, private_key=Ed25519PrivateKey.generate())

    return _make


# ─── Identity directory ───────────────────────────────────────────


class InMemoryIdentityDirectory:
    def __init__(self) -> None:
        self.rows: dict[str, IdentityRecord] = {}
        self.events: list[tuple[str, str, str | None]] = []

    async def fetch(self, did: str) -> IdentityRecord | None:
        return self.rows.get(did)

    async def lookup_active(self, did: str) -> PublicKeyRecord | None:
        await asyncio.sleep(0)
        record = self.rows.get(did)
        if record is None or not record.is_active:
            return None
        return PublicKeyRecord(did=did, public_key=record.public_key)

    async def register(self, did, public_key, namespace, label=None, actor=None) -> IdentityRecord:
        if did in self.rows:
            raise Conflict(f"DID already registered: {did}")
        now = utc_now()
        record = IdentityRecord(
            did=did,
            status=IdentityStatus.ACTIVE,
            public_key=public_key,
            namespace=namespace,
            label=label,
            created_at=now,
            updated_at=now,
        )
        self.rows[did] = record
        self.events.append((did, "registered", actor))
        return record

    async def revoke(self, did: str, actor: str | None = None) -> IdentityRecord:
        record = self.rows.get(did)
        if record is None or not record.is_active:
            raise NotFound(f"DID not found or already revoked: {did}")
        now = utc_now()
        revoked = record.model_copy(
            update={"status": IdentityStatus.REVOKED, "revoked_at": now, "updated_at": now}
        )
        self.rows[did] = revoked
        self.events.append((did, "revoked", actor))
        return revoked


# ─── Entries ──────────────────────────────────────────────────────


def _order_key(kind: EntryKind):
    if kind is EntryKind.PATTERN:
        return lambda r: (-r["votes_up"], -r["downloads"], r["created_at"], str(r["id"]))
    return lambda r: (-int(r["verified"]), -r["votes_up"], r["created_at"], str(r["id"]))


class InMemoryEntryRepository:
    def __init__(self, spec: EntryKindSpec) -> None:
        self._spec = spec
        self.rows: dict[UUID, dict[str, Any]] = {}
        self._clock = utc_now()

    @property
    def spec(self) -> EntryKindSpec:
        return self._spec

    def _tick(self):
        # Strictly increasing created_at keeps insertion order observable
        self._clock += timedelta(microseconds=1)
        return self._clock

    def add(self, author_did: str | None = None, **fields: Any) -> UUID:
        """Insert directly, bypassing the store (seeded or curated rows)."""
        now = self._tick()
        entry_id = fields.pop("id", None) or uuid4()
        row = {
            "id": entry_id,
            "author_did": author_did,
            "votes_up": 0,
            "votes_down": 0,
            "verified": False,
            "active": True,
            "created_at": now,
            "updated_at": now,
        }
        if self._spec.kind is EntryKind.PATTERN:
            row.update({"description": None, "replacement_hint": None, "severity": "high", "downloads": 0})
        else:
            row.update({"requires_confirmation": False, "rationale": None})
        row.update(fields)
        self.rows[entry_id] = row
        return entry_id

    async def is_taken(self, value: str) -> bool:
        field = self._spec.unique_field
        if field is None:
            return False
        return any(r[field] == value and r["active"] for r in self.rows.values())

    async def insert(self, submission, author_did: str) -> UUID:
        field = self._spec.unique_field
        if field is not None and await self.is_taken(getattr(submission, field)):
            raise Duplicate(f"{self._spec.label} '{getattr(submission, field)}' already exists")
        content = {c: getattr(submission, c) for c in self._spec.content_columns}
        return self.add(author_did=author_did, **content)

    async def list(self, filters: dict[str, Any], offset: int, limit: int):
        rows = [
            r
            for r in self.rows.values()
            if r["active"] and all(r[self._spec.filters[k]] == v for k, v in filters.items())
        ]
        rows.sort(key=_order_key(self._spec.kind))
        return [self._spec.model.model_validate(r) for r in rows[offset : offset + limit]]

    async def get(self, entry_id: UUID):
        row = self.rows.get(entry_id)
        if row is None or not row["active"]:
            return None
        return self._spec.model.model_validate(row)

    async def exists_active(self, entry_id: UUID) -> bool:
        await asyncio.sleep(0)
        row = self.rows.get(entry_id)
        return row is not None and row["active"]

    async def bundle(self) -> list[BundleEntry]:
        selected = [r for r in self.rows.values() if r["active"] and r["verified"]]
        for row in selected:
            row["downloads"] += 1
        entries = [BundleEntry.model_validate(r) for r in selected]
        entries.sort(key=lambda e: (e.category, e.name))
        return entries


# ─── Votes ────────────────────────────────────────────────────────


class InMemoryVoteRepository:
    def __init__(self, entries: dict[EntryKind, InMemoryEntryRepository]) -> None:
        self._entries = entries
        self.ledger: dict[tuple[str, str, UUID], str] = {}

    async def record(self, spec, target_id, direction, voter_did):
        await asyncio.sleep(0)
        key = (voter_did, spec.kind.value, target_id)
        if key in self.ledger:
            return None
        self.ledger[key] = direction.value
        row = self._entries[spec.kind].rows[target_id]
        row[direction.tally_column] += 1
        return utc_now()

    async def reconcile(self, spec) -> int:
        corrected = 0
        for entry_id, row in self._entries[spec.kind].rows.items():
            votes = [v for (_, kind, target), v in self.ledger.items() if kind == spec.kind.value and target == entry_id]
            up, down = votes.count("up"), votes.count("down")
            if (row["votes_up"], row["votes_down"]) != (up, down):
                row["votes_up"], row["votes_down"] = up, down
                corrected += 1
        return corrected


# ─── Cache ────────────────────────────────────────────────────────


class FakeRedisClient:
    """Dict-backed stand-in for RedisClient's get/set_json/delete surface."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        self.store[key] = orjson.dumps(value).decode()
        self.ttls[key] = ttl

    async def delete(self, key: str) -> None:
        self.store.pop(key, None)
        self.ttls.pop(key, None)

    async def health_check(self) -> dict[str, Any]:
        return {"status": "connected"}

    async def close(self) -> None:
        pass


# ─── Assembled registry ───────────────────────────────────────────


@pytest.fixture
def config() -> SigilConfig:
    return SigilConfig()


@pytest.fixture
def directory() -> InMemoryIdentityDirectory:
    return InMemoryIdentityDirectory()


@pytest.fixture
def redis_client() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture
def pattern_repo() -> InMemoryEntryRepository:
    return InMemoryEntryRepository(PATTERN_KIND)


@pytest.fixture
def policy_repo() -> InMemoryEntryRepository:
    return InMemoryEntryRepository(POLICY_KIND)


@pytest.fixture
def vote_repo(pattern_repo, policy_repo) -> InMemoryVoteRepository:
    return InMemoryVoteRepository({EntryKind.PATTERN: pattern_repo, EntryKind.POLICY: policy_repo})


@pytest.fixture
def registry(config, directory, redis_client, pattern_repo, policy_repo, vote_repo) -> RegistryContext:
    return assemble(
        config,
        directory=directory,
        cache=ResolutionCache(redis_client, ttl_seconds=config.cache.ttl_seconds),
        pattern_repository=pattern_repo,
        policy_repository=policy_repo,
        vote_repository=vote_repo,
    )
