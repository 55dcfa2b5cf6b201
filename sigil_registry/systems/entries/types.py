"""
SIGIL Registry — Entry Types

Community-submitted content. Two kinds share one lifecycle: submitted
unverified, listed and fetched while active, voted on by active DIDs.
Only a curator (out of band) sets `verified`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import Field

from sigil_registry.primitives.common import RegistryBaseModel, utc_now


class EntryKind(str, enum.Enum):
    PATTERN = "pattern"
    POLICY = "policy"


class Entry(RegistryBaseModel):
    id: UUID
    author_did: str | None = None
    votes_up: int = Field(default=0, ge=0)
    votes_down: int = Field(default=0, ge=0)
    verified: bool = False
    created_at: datetime
    updated_at: datetime


class ScannerPattern(Entry):
    name: str
    description: str | None = None
    category: str
    pattern: str
    replacement_hint: str | None = None
    severity: str
    downloads: int = Field(default=0, ge=0)


class SecurityPolicy(Entry):
    tool_name: str
    risk_level: str
    requires_trust: str
    requires_confirmation: bool = False
    rationale: str | None = None


# ─── Submissions ──────────────────────────────────────────────────
# Fields are carried raw: the canonical message is rebuilt from exactly
# what the client sent, so no normalising validators run here.


class PatternSubmission(RegistryBaseModel):
    name: str
    description: str | None = None
    category: str
    pattern: str
    replacement_hint: str | None = None
    severity: str = "high"


class PolicySubmission(RegistryBaseModel):
    tool_name: str
    risk_level: str
    requires_trust: str
    requires_confirmation: bool = False
    rationale: str | None = None


EntryT = TypeVar("EntryT", bound=Entry)


@dataclass
class Page(Generic[EntryT]):
    items: list[EntryT]
    offset: int
    limit: int

    @property
    def count(self) -> int:
        return len(self.items)


# ─── Bundle ───────────────────────────────────────────────────────


class BundleEntry(RegistryBaseModel):
    name: str
    category: str
    pattern: str
    severity: str
    replacement_hint: str | None = None


@dataclass
class Bundle:
    patterns: list[BundleEntry]
    version: str = "1"
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "generated_at": self.generated_at.isoformat(),
            "count": len(self.patterns),
            "patterns": [p.model_dump(mode="json") for p in self.patterns],
        }
