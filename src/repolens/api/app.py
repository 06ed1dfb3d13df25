# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""FastAPI application factory for the repolens API.

Provides create_app() to construct a configured FastAPI application with the
summary endpoints. The summary store and HTTP client lifecycles are managed
via FastAPI lifespan events.

Usage:
    >>> app = create_app()
    >>> # Run with uvicorn:
    >>> # uvicorn repolens.api.app:create_app --factory
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from repolens import __version__
from repolens.api.errors import register_exception_handlers
from repolens.api.router_summaries import create_summary_router
from repolens.cache.protocols import ProtocolKeyValueStore
from repolens.cache.store_redis import RedisKeyValueStore
from repolens.services import RepoLensServices, build_services
from repolens.settings import RepoLensSettings
from repolens.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class _AppState:
    """Shared state for the lifespan and dependency closures.

    ``services`` is set before the server accepts requests and cleared only
    after in-flight requests have drained.
    """

    settings: RepoLensSettings
    store: ProtocolKeyValueStore | None = None
    services: RepoLensServices | None = None


def create_app(
    settings: RepoLensSettings | None = None,
    *,
    store: ProtocolKeyValueStore | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Configuration; read from ``REPOLENS_*`` when omitted.
        store: Key-value store override (tests pass an in-memory store).
    """
    resolved = settings or RepoLensSettings()
    configure_logging(resolved.log_level)
    state = _AppState(settings=resolved, store=store)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
        """Manage store and client lifecycles."""
        services = build_services(state.settings, store=state.store)
        state.services = services
        logger.info("repolens services started")

        yield

        logger.info("Closing repolens services...")
        await services.close()
        state.services = None
        logger.info("repolens services closed")

    async def get_services() -> RepoLensServices:
        """Dependency returning the services, 503 outside the lifespan."""
        services = state.services
        if services is None:
            raise HTTPException(
                status_code=503,
                detail="Service unavailable: summary services not initialized.",
            )
        return services

    app = FastAPI(
        title="repolens API",
        description="Cached LLM summaries for GitHub repository trees",
        version=__version__,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(create_summary_router(get_services=get_services))

    # Mounted at root so probes do not depend on the API version prefix.
    @app.get("/health", tags=["infrastructure"])
    async def health_check() -> JSONResponse:
        """Liveness/readiness probe."""
        services = state.services
        if services is None:
            return JSONResponse(status_code=503, content={"status": "starting"})
        store_backend = services.cache.store
        if isinstance(store_backend, RedisKeyValueStore) and not await store_backend.ping():
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "detail": "summary store unreachable"},
            )
        return JSONResponse(content={"status": "healthy"})

    return app


__all__ = ["create_app"]
