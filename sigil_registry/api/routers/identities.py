"""
SIGIL Registry — DID Router

Endpoints:
  GET  /resolve/{did}  — DID document (active or revoked), cache-aside
  POST /register       — register a new DID (registry key when configured)
  POST /revoke/{did}   — revoke an active DID (registry key when configured)
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request, status

from sigil_registry.api.deps import get_registry, request_actor
from sigil_registry.api.schemas import RegisterRequest

logger = structlog.get_logger("sigil_registry.api.identities")

router = APIRouter(tags=["identities"])


@router.get("/resolve/{did}")
async def resolve_did(did: str, request: Request) -> dict[str, Any]:
    record = await get_registry(request).identities.resolve(did)
    return record.model_dump(mode="json")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_did(body: RegisterRequest, request: Request) -> dict[str, Any]:
    record = await get_registry(request).identities.register(
        body.did,
        body.public_key,
        body.namespace,
        body.label,
        actor=request_actor(request),
    )
    return {
        "did": record.did,
        "status": record.status.value,
        "message": "DID registered successfully",
    }


@router.post("/revoke/{did}")
async def revoke_did(did: str, request: Request) -> dict[str, Any]:
    record = await get_registry(request).identities.revoke(did, actor=request_actor(request))
    return {
        "did": record.did,
        "status": record.status.value,
        "revoked_at": record.revoked_at.isoformat() if record.revoked_at else None,
        "message": "DID revoked",
    }
