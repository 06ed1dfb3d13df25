# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Mapping of repolens exceptions to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from repolens.exceptions import (
    ContentFetchError,
    GenerationFailedError,
    InvalidCacheKeyError,
    InvalidRepoReferenceError,
    MissingCredentialsError,
    NoChildSummariesError,
    RepoLensError,
    StoreUnavailableError,
    UnsummarizableError,
)

logger = logging.getLogger(__name__)

# First match wins; subclasses before their bases.
_STATUS_BY_ERROR: tuple[tuple[type[RepoLensError], int], ...] = (
    (UnsummarizableError, 422),
    (NoChildSummariesError, 422),
    (MissingCredentialsError, 401),
    (InvalidRepoReferenceError, 400),
    (InvalidCacheKeyError, 400),
    (ContentFetchError, 502),
    (GenerationFailedError, 502),
    (StoreUnavailableError, 503),
)


def status_for(exc: RepoLensError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def handle_repolens_error(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, RepoLensError):
        raise exc
    status_code = status_for(exc)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RepoLensError, handle_repolens_error)


__all__ = ["handle_repolens_error", "register_exception_handlers", "status_for"]
