"""
SIGIL Registry — Error Responses

Maps RegistryError subclasses to `{"error": ..., "code": ...}` with the
class status. Request-shape failures from FastAPI get the same envelope.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from sigil_registry.errors import RegistryError, StoreError

if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

logger = structlog.get_logger("sigil_registry.api.errors")


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error("request_failed", path=request.url.path, error=exc.message)
        # Driver messages stay in the log
        body = {"error": "Internal server error", "code": exc.code}
    else:
        body = exc.to_dict()
    return JSONResponse(status_code=exc.status, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "error": f"{location}: {message}" if location else message,
            "code": "VALIDATION_ERROR",
        },
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistryError, registry_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
