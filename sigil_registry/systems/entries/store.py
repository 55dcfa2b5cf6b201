"""
SIGIL Registry — Entry Store

Signature-gated submission, listing and lookup for one entry kind.

Submission runs its checks in a fixed order and stops at the first
failure, so nothing is persisted unless every check passed:

  1. allow-lists and regex compilation    -> ValidationFailed
  2. author is an active DID              -> UnknownAuthor
  3. signature over the canonical message -> InvalidSignature
  4. unique field free among active rows  -> Duplicate
  5. insert (verified = false, active = true)

The author lookup always goes to the directory, never to the resolution
cache, so a revoked author is rejected immediately.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic
from uuid import UUID

import structlog

from sigil_registry.crypto.signatures import SignatureError, verify_signature
from sigil_registry.errors import (
    Duplicate,
    InvalidSignature,
    NotFound,
    UnknownAuthor,
    ValidationFailed,
)
from sigil_registry.systems.entries.types import Bundle, EntryT, Page, ScannerPattern

if TYPE_CHECKING:
    from sigil_registry.primitives.common import RegistryBaseModel
    from sigil_registry.systems.entries.kinds import EntryKindSpec
    from sigil_registry.systems.entries.repository import EntryRepository
    from sigil_registry.systems.identity.directory import IdentityDirectory

logger = structlog.get_logger("sigil_registry.entries")


class EntryStore(Generic[EntryT]):
    def __init__(
        self,
        repository: EntryRepository,
        directory: IdentityDirectory,
        message_prefix: str = "sigil-registry",
        default_page_size: int = 50,
        max_page_size: int = 200,
    ) -> None:
        self._repo = repository
        self._directory = directory
        self._prefix = message_prefix
        self._default_limit = default_page_size
        self._max_limit = max_page_size

    @property
    def spec(self) -> EntryKindSpec:
        return self._repo.spec

    async def submit(
        self,
        submission: RegistryBaseModel,
        author_did: str,
        signature: str,
    ) -> UUID:
        spec = self.spec
        spec.validate(submission)

        author = await self._directory.lookup_active(author_did)
        if author is None:
            raise UnknownAuthor(author_did)

        message = spec.message(submission, author_did, self._prefix)
        try:
            verify_signature(author.public_key, message, signature)
        except SignatureError as exc:
            logger.info(
                "entry_signature_rejected",
                kind=spec.kind.value,
                author=author_did,
                reason=type(exc).__name__,
            )
            raise InvalidSignature(exc) from exc

        if spec.unique_field is not None:
            value = getattr(submission, spec.unique_field)
            if await self._repo.is_taken(value):
                raise Duplicate(f"{spec.label} '{value}' already exists")

        entry_id = await self._repo.insert(submission, author_did)
        logger.info("entry_submitted", kind=spec.kind.value, id=str(entry_id), author=author_did)
        return entry_id

    def clamp(self, offset: int | None, limit: int | None) -> tuple[int, int]:
        limit = self._default_limit if limit is None else limit
        limit = max(1, min(limit, self._max_limit))
        offset = max(0, offset or 0)
        return offset, limit

    async def list(
        self,
        filters: dict[str, Any] | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> Page[EntryT]:
        filters = {k: v for k, v in (filters or {}).items() if v is not None}
        unknown = set(filters) - set(self.spec.filters)
        if unknown:
            raise ValidationFailed(f"unknown filter: {', '.join(sorted(unknown))}")
        offset, limit = self.clamp(offset, limit)
        items = await self._repo.list(filters, offset, limit)
        return Page(items=items, offset=offset, limit=limit)

    async def get(self, entry_id: UUID) -> EntryT:
        entry = await self._repo.get(entry_id)
        if entry is None:
            raise NotFound(f"{self.spec.label} {entry_id} not found")
        return entry

    async def exists(self, entry_id: UUID) -> bool:
        return await self._repo.exists_active(entry_id)


class PatternStore(EntryStore[ScannerPattern]):
    """Patterns additionally publish the verified bundle."""

    async def bundle(self) -> Bundle:
        entries = await self._repo.bundle()
        logger.info("pattern_bundle_served", count=len(entries))
        return Bundle(patterns=entries)
