"""
SIGIL Registry — Votes System

Idempotent, signature-gated voting with denormalised tallies.
"""

from sigil_registry.systems.votes.ledger import VoteLedger
from sigil_registry.systems.votes.repository import VoteRepository
from sigil_registry.systems.votes.types import VoteDirection, VoteReceipt

__all__ = ["VoteDirection", "VoteLedger", "VoteReceipt", "VoteRepository"]
