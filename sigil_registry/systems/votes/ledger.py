"""
SIGIL Registry — Vote Ledger

One vote per (voter, kind, target), enforced by the ledger's unique
constraint rather than a read-then-write check, so concurrent duplicate
votes produce exactly one success and AlreadyVoted for the rest.

Check order: direction, voter, signature, target, ledger insert. The
signed message uses the target id exactly as the client sent it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from sigil_registry.crypto.messages import vote_message
from sigil_registry.crypto.signatures import SignatureError, verify_signature
from sigil_registry.errors import (
    AlreadyVoted,
    InvalidSignature,
    InvalidVote,
    NotFound,
    UnknownAuthor,
    ValidationFailed,
)
from sigil_registry.systems.entries.types import EntryKind
from sigil_registry.systems.votes.types import VoteDirection, VoteReceipt

if TYPE_CHECKING:
    from sigil_registry.systems.entries.store import EntryStore
    from sigil_registry.systems.identity.directory import IdentityDirectory
    from sigil_registry.systems.votes.repository import VoteRepository

logger = structlog.get_logger("sigil_registry.votes")


class VoteLedger:
    def __init__(
        self,
        directory: IdentityDirectory,
        stores: dict[EntryKind, EntryStore],
        repository: VoteRepository,
        message_prefix: str = "sigil-registry",
    ) -> None:
        self._directory = directory
        self._stores = stores
        self._repo = repository
        self._prefix = message_prefix

    async def vote(
        self,
        target_kind: EntryKind | str,
        target_id: str,
        direction: str,
        voter_did: str,
        signature: str,
    ) -> VoteReceipt:
        try:
            vote = VoteDirection(direction)
        except ValueError:
            raise InvalidVote() from None

        try:
            kind = EntryKind(target_kind)
        except ValueError:
            raise ValidationFailed(f"unknown target type: {target_kind}") from None
        store = self._stores[kind]

        voter = await self._directory.lookup_active(voter_did)
        if voter is None:
            raise UnknownAuthor(voter_did)

        message = vote_message(kind.value, target_id, vote.value, voter_did, prefix=self._prefix)
        try:
            verify_signature(voter.public_key, message, signature)
        except SignatureError as exc:
            raise InvalidSignature(exc) from exc

        try:
            entry_id = UUID(target_id)
        except ValueError:
            raise NotFound(f"{store.spec.label} {target_id} not found") from None
        if not await store.exists(entry_id):
            raise NotFound(f"{store.spec.label} {target_id} not found")

        voted_at = await self._repo.record(store.spec, entry_id, vote, voter_did)
        if voted_at is None:
            raise AlreadyVoted()

        logger.info("vote_recorded", kind=kind.value, target=target_id, vote=vote.value, voter=voter_did)
        return VoteReceipt(id=entry_id, vote=vote, voted_at=voted_at)

    async def reconcile(self, target_kind: EntryKind | str) -> int:
        """Rewrite tallies of one kind to match the ledger."""
        kind = EntryKind(target_kind)
        corrected = await self._repo.reconcile(self._stores[kind].spec)
        logger.info("tallies_reconciled", kind=kind.value, corrected=corrected)
        return corrected
