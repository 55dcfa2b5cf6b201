"""
SIGIL Registry — Vote Types
"""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID

from sigil_registry.primitives.common import RegistryBaseModel


class VoteDirection(str, enum.Enum):
    UP = "up"
    DOWN = "down"

    @property
    def tally_column(self) -> str:
        return "votes_up" if self is VoteDirection.UP else "votes_down"


class VoteReceipt(RegistryBaseModel):
    """Returned once a ledger row has been written and the tally bumped."""

    id: UUID
    vote: VoteDirection
    recorded: bool = True
    voted_at: datetime | None = None
