"""
SIGIL Registry — Identity Types

A DID names a registered Ed25519 public key holder. Its key never changes;
its status moves from active to revoked exactly once and never back.
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import model_validator

from sigil_registry.primitives.common import RegistryBaseModel


class IdentityStatus(str, enum.Enum):
    ACTIVE = "active"
    REVOKED = "revoked"


class IdentityRecord(RegistryBaseModel):
    """
    One row of the identity directory, and the resolution payload.

    The cache stores this model serialised as JSON; it is a derived,
    time-bounded copy and never the authoritative record.
    """

    did: str
    status: IdentityStatus
    public_key: str
    namespace: str
    label: str | None = None
    created_at: datetime
    updated_at: datetime
    revoked_at: datetime | None = None

    @model_validator(mode="after")
    def _revoked_at_matches_status(self) -> IdentityRecord:
        if (self.status == IdentityStatus.REVOKED) != (self.revoked_at is not None):
            raise ValueError("revoked_at must be set if and only if status is revoked")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == IdentityStatus.ACTIVE


class PublicKeyRecord(RegistryBaseModel):
    """The signing key of a currently-active DID."""

    did: str
    public_key: str
