# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Exceptions for repolens.

Typed errors shared by the cache, generator, client and reconciliation
layers. Single-item operations raise them to the caller; batch operations
catch them per item and record an outcome instead.

Store failures are special: ``StoreUnavailableError`` is raised by the
key-value adapters but never escapes the summary generator, which treats a
failed read as a miss and a failed write as a no-op.
"""

from __future__ import annotations


class RepoLensError(Exception):
    """Base class for every error raised by repolens."""


class UnsummarizableError(RepoLensError):
    """Raised when a file type is not eligible for summarization.

    Terminal and user-facing; retrying with the same file name cannot succeed.
    """

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name
        super().__init__(
            f"This file type cannot be summarized: {file_name}. "
            "Only code and text files are supported."
        )


class MissingCredentialsError(RepoLensError):
    """Raised when no API key is available for the selected provider."""

    def __init__(self, provider: str, message: str | None = None) -> None:
        self.provider = provider
        super().__init__(message or f"{_provider_label(provider)} API key is required")


class ContentFetchError(RepoLensError):
    """Raised when the source-of-truth content fetch fails (non-2xx or transport)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class GenerationFailedError(RepoLensError):
    """Raised when the generation provider rejects or fails a request.

    The message carries the upstream error text when the provider returned a
    parseable JSON error body, otherwise the raw response body.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class StoreUnavailableError(RepoLensError):
    """Raised by key-value adapters on cache transport failure."""


class NoChildSummariesError(RepoLensError):
    """Raised when a directory roll-up is requested with zero child summaries."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            "No summarized children found for directory "
            f"{path or '/'}. Summarize some files in this directory first."
        )


class InvalidRepoReferenceError(RepoLensError, ValueError):
    """Raised for a malformed ``owner/repo`` identifier."""


class InvalidCacheKeyError(RepoLensError, ValueError):
    """Raised when a cache key cannot be encoded or decoded."""


def _provider_label(provider: object) -> str:
    value = str(getattr(provider, "value", provider))
    labels = {"groq": "Groq", "openai": "OpenAI"}
    return labels.get(value.lower(), value)


__all__ = [
    "ContentFetchError",
    "GenerationFailedError",
    "InvalidCacheKeyError",
    "InvalidRepoReferenceError",
    "MissingCredentialsError",
    "NoChildSummariesError",
    "RepoLensError",
    "StoreUnavailableError",
    "UnsummarizableError",
]
