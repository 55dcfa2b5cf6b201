"""
SIGIL Registry — Request Schemas

Inbound JSON bodies. String fields are kept exactly as sent; the canonical
message is rebuilt from them.
"""

from __future__ import annotations

from sigil_registry.primitives.common import RegistryBaseModel
from sigil_registry.systems.entries.types import PatternSubmission, PolicySubmission


class RegisterRequest(RegistryBaseModel):
    did: str
    public_key: str
    namespace: str
    label: str | None = None


class CreatePatternRequest(PatternSubmission):
    author_did: str
    signature: str

    def submission(self) -> PatternSubmission:
        return PatternSubmission.model_validate(self.model_dump(exclude={"author_did", "signature"}))


class CreatePolicyRequest(PolicySubmission):
    author_did: str
    signature: str

    def submission(self) -> PolicySubmission:
        return PolicySubmission.model_validate(self.model_dump(exclude={"author_did", "signature"}))


class VoteRequest(RegistryBaseModel):
    voter_did: str
    # Validated by the ledger so a bad direction maps to INVALID_VOTE, not 422
    vote: str
    signature: str
