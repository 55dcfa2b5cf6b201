"""
Unit tests for identity record invariants.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sigil_registry.primitives.common import utc_now
from sigil_registry.systems.identity.types import IdentityRecord


def _fields(**overrides):
    now = utc_now()
    fields = {
        "did": "did:sigil:alice",
        "status": "active",
        "public_key": "A" * 43,
        "namespace": "alice",
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return fields


class TestRevokedAtInvariant:
    def test_active_without_revoked_at(self):
        assert IdentityRecord(**_fields()).is_active

    def test_revoked_with_revoked_at(self):
        record = IdentityRecord(**_fields(status="revoked", revoked_at=utc_now()))
        assert not record.is_active

    def test_revoked_without_revoked_at_rejected(self):
        with pytest.raises(ValidationError):
            IdentityRecord(**_fields(status="revoked"))

    def test_active_with_revoked_at_rejected(self):
        with pytest.raises(ValidationError):
            IdentityRecord(**_fields(revoked_at=utc_now()))

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            IdentityRecord(**_fields(status="suspended"))
