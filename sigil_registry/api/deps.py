"""
SIGIL Registry — Request Helpers and Registry Key Middleware
"""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from sigil_registry.errors import Unauthorized

if TYPE_CHECKING:
    from starlette.requests import Request

    from sigil_registry.context import RegistryContext


def get_registry(request: Request) -> RegistryContext:
    return request.app.state.registry


def request_actor(request: Request) -> str | None:
    """Who performed an identity lifecycle change, for the audit log."""
    return request.client.host if request.client else None


class RegistryKeyMiddleware(BaseHTTPMiddleware):
    """
    Guards identity writes (POST /register, POST /revoke/{did}) with the
    shared registry key.

    When no key is configured (dev mode), all requests pass through.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method != "POST" or not (path == "/register" or path.startswith("/revoke/")):
            return await call_next(request)

        registry = getattr(request.app.state, "registry", None)
        if registry is None or registry.config.registry.registry_key is None:
            return await call_next(request)

        expected = registry.config.registry.registry_key
        provided = request.headers.get(registry.config.server.registry_key_header, "")
        if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
            error = Unauthorized("Invalid or missing registry key")
            return JSONResponse(status_code=error.status, content=error.to_dict())

        return await call_next(request)
