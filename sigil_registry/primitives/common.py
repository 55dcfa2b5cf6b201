"""
SIGIL Registry — Common Primitives

Shared base model and time helpers used by every subsystem.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


class RegistryBaseModel(BaseModel):
    """Base model for registry records and payloads."""

    model_config = {"populate_by_name": True, "from_attributes": True}
