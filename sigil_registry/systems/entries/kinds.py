"""
SIGIL Registry — Entry Kinds

Patterns and policies differ only in their table, content columns,
allow-lists, canonical message and listing order. Each kind is described
once here and the generic store and repository are driven by it.

The column and table names below are interpolated into SQL. They are
constants of this module and never come from a request.

Submitted regexes are compiled with RE2, whose syntax matches the scanners
that download the bundle: no lookaround, no backreferences, \\p{..}
classes allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import re2

from sigil_registry.crypto.messages import pattern_message, policy_message
from sigil_registry.errors import ValidationFailed
from sigil_registry.primitives.common import RegistryBaseModel
from sigil_registry.systems.entries.types import (
    Entry,
    EntryKind,
    PatternSubmission,
    PolicySubmission,
    ScannerPattern,
    SecurityPolicy,
)

PATTERN_CATEGORIES = ("secret", "pii", "credential", "financial")
SEVERITIES = ("low", "medium", "high", "critical")
RISK_LEVELS = ("low", "medium", "high", "critical")
TRUST_LEVELS = ("Low", "Medium", "High")


@dataclass(frozen=True)
class EntryKindSpec:
    kind: EntryKind
    label: str
    table: str
    model: type[Entry]
    submission: type[RegistryBaseModel]
    # Content columns written on insert, in submission field order
    content_columns: tuple[str, ...]
    # Query parameter name -> column, all equality filters
    filters: dict[str, str]
    order_by: str
    validate: Callable[[RegistryBaseModel], None]
    # (submission, author_did, prefix) -> canonical message
    message: Callable[[RegistryBaseModel, str, str], str]
    unique_field: str | None = None
    extra_columns: tuple[str, ...] = field(default=())

    @property
    def select_columns(self) -> str:
        common = ("id", "author_did", "votes_up", "votes_down", "verified", "created_at", "updated_at")
        return ", ".join(common + self.content_columns + self.extra_columns)


def _one_of(value: str, allowed: tuple[str, ...], what: str) -> None:
    if value not in allowed:
        raise ValidationFailed(f"{what} must be one of: {', '.join(allowed)}")


# ─── Patterns ─────────────────────────────────────────────────────


def validate_pattern(submission: PatternSubmission) -> None:
    if not submission.name.strip():
        raise ValidationFailed("name must not be empty")
    _one_of(submission.category, PATTERN_CATEGORIES, "category")
    _one_of(submission.severity, SEVERITIES, "severity")
    try:
        re2.compile(submission.pattern)
    except re2.error as exc:
        raise ValidationFailed(f"invalid regex: {exc}") from exc


def _pattern_message(submission: PatternSubmission, author_did: str, prefix: str) -> str:
    return pattern_message(
        submission.name, submission.category, submission.pattern, author_did, prefix=prefix
    )


PATTERN_KIND = EntryKindSpec(
    kind=EntryKind.PATTERN,
    label="Pattern",
    table="scanner_patterns",
    model=ScannerPattern,
    submission=PatternSubmission,
    content_columns=("name", "description", "category", "pattern", "replacement_hint", "severity"),
    extra_columns=("downloads",),
    filters={"category": "category", "severity": "severity", "verified": "verified"},
    order_by="votes_up DESC, downloads DESC, created_at ASC, id ASC",
    validate=validate_pattern,
    message=_pattern_message,
    unique_field="name",
)


# ─── Policies ─────────────────────────────────────────────────────


def validate_policy(submission: PolicySubmission) -> None:
    if not submission.tool_name.strip():
        raise ValidationFailed("tool_name must not be empty")
    _one_of(submission.risk_level, RISK_LEVELS, "risk_level")
    _one_of(submission.requires_trust, TRUST_LEVELS, "requires_trust")


def _policy_message(submission: PolicySubmission, author_did: str, prefix: str) -> str:
    return policy_message(
        submission.tool_name,
        submission.risk_level,
        submission.requires_trust,
        author_did,
        prefix=prefix,
    )


POLICY_KIND = EntryKindSpec(
    kind=EntryKind.POLICY,
    label="Policy",
    table="security_policies",
    model=SecurityPolicy,
    submission=PolicySubmission,
    content_columns=(
        "tool_name",
        "risk_level",
        "requires_trust",
        "requires_confirmation",
        "rationale",
    ),
    filters={"tool_name": "tool_name", "risk_level": "risk_level", "verified": "verified"},
    order_by="verified DESC, votes_up DESC, created_at ASC, id ASC",
    validate=validate_policy,
    message=_policy_message,
)

KINDS: dict[EntryKind, EntryKindSpec] = {
    EntryKind.PATTERN: PATTERN_KIND,
    EntryKind.POLICY: POLICY_KIND,
}
