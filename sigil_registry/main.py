"""
SIGIL Registry — Application Entry Point

FastAPI application: DID resolution, signed pattern and policy
submissions, and the vote ledger.

`uvicorn sigil_registry.main:app` or the `sigil-registry` script.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Load .env file before any configuration is loaded
load_dotenv()

from sigil_registry import __version__
from sigil_registry.api.deps import RegistryKeyMiddleware, get_registry
from sigil_registry.api.errors import install_error_handlers
from sigil_registry.api.routers.identities import router as identities_router
from sigil_registry.api.routers.patterns import router as patterns_router
from sigil_registry.api.routers.policies import router as policies_router
from sigil_registry.clients.postgres import PostgresClient
from sigil_registry.clients.redis import connect_cache
from sigil_registry.config import load_config
from sigil_registry.context import build_context
from sigil_registry.database.migrations import run_migrations
from sigil_registry.telemetry.logging import setup_logging

if TYPE_CHECKING:
    from sigil_registry.context import RegistryContext

logger = structlog.get_logger("sigil_registry")


def _config_path() -> str:
    return os.environ.get("SIGIL_CONFIG_PATH", "config/default.yaml")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown sequence.

    A context injected through `create_app` (tests) is used as-is; nothing
    is connected or closed for it.
    """
    if getattr(app.state, "registry", None) is not None:
        yield
        return

    # ── 1. Load configuration ─────────────────────────────────
    config_path = _config_path()
    config = load_config(config_path)

    # ── 2. Set up logging ─────────────────────────────────────
    setup_logging(config.logging, service_name=config.service_name)
    logger.info("sigil_registry_starting", version=__version__, config_path=config_path)

    # ── 3. Connect to data stores ─────────────────────────────
    db = PostgresClient(config.database)
    await db.connect()
    if config.database.migrate:
        await run_migrations(db)

    cache_client = await connect_cache(config.cache)

    # ── 4. Assemble the registry ──────────────────────────────
    app.state.registry = build_context(config, db, cache_client)

    if config.registry.registry_key is None:
        logger.warning(
            "registry_key_not_set",
            note="POST /register and POST /revoke are open (dev mode)",
        )
    logger.info(
        "sigil_registry_ready",
        host=config.server.host,
        port=config.server.port,
        cache_enabled=cache_client is not None,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────
    logger.info("sigil_registry_shutting_down")
    await app.state.registry.close()
    app.state.registry = None
    logger.info("sigil_registry_shutdown_complete")


def create_app(context: RegistryContext | None = None) -> FastAPI:
    """Build the application, optionally around a pre-assembled context."""
    app = FastAPI(
        title="SIGIL Registry",
        description="DID resolution and signed community scanner patterns and policies",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = context

    config = context.config if context else load_config(_config_path())
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RegistryKeyMiddleware)
    install_error_handlers(app)

    app.include_router(identities_router)
    app.include_router(patterns_router)
    app.include_router(policies_router)

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        """Service health check."""
        stores = await get_registry(request).health()
        overall = "ok"
        if stores["postgres"].get("status") not in ("connected", "not_configured"):
            overall = "degraded"
        return {
            "status": overall,
            "service": "sigil-registry",
            "version": __version__,
            "stores": stores,
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    config = load_config(_config_path())
    uvicorn.run(
        "sigil_registry.main:app",
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )
