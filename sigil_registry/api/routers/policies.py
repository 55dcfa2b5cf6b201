"""
SIGIL Registry — Security Policy Router

Endpoints:
  GET  /policies            — list active policies (tool_name, risk_level, verified)
  GET  /policies/{id}       — one active policy
  POST /policies            — signed submission, lands unverified
  POST /policies/{id}/vote  — signed vote, once per DID
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Request, status

from sigil_registry.api.deps import get_registry
from sigil_registry.api.schemas import CreatePolicyRequest, VoteRequest
from sigil_registry.systems.entries.types import EntryKind

router = APIRouter(prefix="/policies", tags=["policies"])


@router.get("")
async def list_policies(
    request: Request,
    tool_name: str | None = None,
    risk_level: str | None = None,
    verified: bool | None = None,
    offset: int | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    page = await get_registry(request).policies.list(
        {"tool_name": tool_name, "risk_level": risk_level, "verified": verified},
        offset=offset,
        limit=limit,
    )
    return {
        "count": page.count,
        "offset": page.offset,
        "limit": page.limit,
        "policies": [p.model_dump(mode="json") for p in page.items],
    }


@router.get("/{entry_id}")
async def get_policy(entry_id: UUID, request: Request) -> dict[str, Any]:
    policy = await get_registry(request).policies.get(entry_id)
    return policy.model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_policy(body: CreatePolicyRequest, request: Request) -> dict[str, Any]:
    entry_id = await get_registry(request).policies.submit(
        body.submission(), body.author_did, body.signature
    )
    return {
        "id": str(entry_id),
        "tool_name": body.tool_name,
        "status": "pending_review",
        "message": "Policy submitted. It will be applied once verified by a maintainer.",
    }


@router.post("/{entry_id}/vote")
async def vote_policy(entry_id: str, body: VoteRequest, request: Request) -> dict[str, Any]:
    receipt = await get_registry(request).votes.vote(
        EntryKind.POLICY, entry_id, body.vote, body.voter_did, body.signature
    )
    return {"id": str(receipt.id), "vote": receipt.vote.value, "recorded": receipt.recorded}
