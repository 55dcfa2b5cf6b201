"""
SIGIL Registry — Scanner Pattern Router

Endpoints:
  GET  /patterns            — list active patterns (category, severity, verified)
  GET  /patterns/bundle     — every verified pattern, counts a download each
  GET  /patterns/{id}       — one active pattern
  POST /patterns            — signed submission, lands unverified
  POST /patterns/{id}/vote  — signed vote, once per DID
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Request, status

from sigil_registry.api.deps import get_registry
from sigil_registry.api.schemas import CreatePatternRequest, VoteRequest
from sigil_registry.systems.entries.types import EntryKind

router = APIRouter(prefix="/patterns", tags=["patterns"])


@router.get("")
async def list_patterns(
    request: Request,
    category: str | None = None,
    severity: str | None = None,
    verified: bool | None = None,
    offset: int | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    page = await get_registry(request).patterns.list(
        {"category": category, "severity": severity, "verified": verified},
        offset=offset,
        limit=limit,
    )
    return {
        "count": page.count,
        "offset": page.offset,
        "limit": page.limit,
        "patterns": [p.model_dump(mode="json") for p in page.items],
    }


# Declared before /{entry_id} so "bundle" is not parsed as an id
@router.get("/bundle")
async def get_bundle(request: Request) -> dict[str, Any]:
    bundle = await get_registry(request).patterns.bundle()
    return bundle.to_dict()


@router.get("/{entry_id}")
async def get_pattern(entry_id: UUID, request: Request) -> dict[str, Any]:
    pattern = await get_registry(request).patterns.get(entry_id)
    return pattern.model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_pattern(body: CreatePatternRequest, request: Request) -> dict[str, Any]:
    entry_id = await get_registry(request).patterns.submit(
        body.submission(), body.author_did, body.signature
    )
    return {
        "id": str(entry_id),
        "name": body.name,
        "status": "pending_review",
        "message": "Pattern submitted. It will appear in the bundle once verified by a maintainer.",
    }


@router.post("/{entry_id}/vote")
async def vote_pattern(entry_id: str, body: VoteRequest, request: Request) -> dict[str, Any]:
    receipt = await get_registry(request).votes.vote(
        EntryKind.PATTERN, entry_id, body.vote, body.voter_did, body.signature
    )
    return {"id": str(receipt.id), "vote": receipt.vote.value, "recorded": receipt.recorded}
