# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""
Shared constants for repolens.

Cache-key prefixes, TTLs, provider endpoints and throttling defaults live
here so the cache, generator and reconciliation layers agree on them.

Usage:
    from repolens.constants import SUMMARY_TTL_SECONDS

    await cache.put_summary(key, record, ttl_seconds=SUMMARY_TTL_SECONDS)
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Cache Keys
# =============================================================================

SUMMARY_KEY_PREFIX: Final[str] = "summary"
"""First segment of every summary record key."""

CHILDREN_COUNT_KEY_PREFIX: Final[str] = "summarized-children"
"""First segment of every children-summarized-count key."""

KEY_FIELD_SEPARATOR: Final[str] = ":"
"""Separator between key fields. Paths containing it cannot be cached."""

# =============================================================================
# Expiry
# =============================================================================

SUMMARY_TTL_SECONDS: Final[int] = 60 * 60 * 24 * 30
"""
Expiry applied to summary and children-count records (30 days).

An expired record is a plain cache miss; the summary is regenerated on the
next request.
"""

LOCAL_CACHE_MAX_ENTRIES: Final[int] = 1024
"""Default capacity of the in-process tier of the summary cache."""

# =============================================================================
# Generation Providers
# =============================================================================

GROQ_API_BASE_URL: Final[str] = "https://api.groq.com/openai/v1"
GROQ_MODEL: Final[str] = "llama-3.3-70b-versatile"

OPENAI_API_BASE_URL: Final[str] = "https://api.openai.com/v1"
OPENAI_MODEL: Final[str] = "gpt-4o"

FILE_SUMMARY_MAX_TOKENS: Final[int] = 500
DIRECTORY_SUMMARY_MAX_TOKENS: Final[int] = 600
SUMMARY_TEMPERATURE: Final[float] = 0.5

# =============================================================================
# GitHub
# =============================================================================

GITHUB_API_BASE_URL: Final[str] = "https://api.github.com"
GITHUB_HTML_BASE_URL: Final[str] = "https://github.com"

# =============================================================================
# Throttling
# =============================================================================

PROVIDER_CALL_DELAY_SECONDS: Final[float] = 0.5
"""
Pause inserted between successive provider calls during a batch run.

Keeps sequential reconciliation under the providers' request rate limits.
Configurable through ``RepoLensSettings.provider_call_delay_seconds``.
"""

DEFAULT_HTTP_TIMEOUT_SECONDS: Final[float] = 60.0

PERCENTAGE_MULTIPLIER: Final[int] = 100


__all__ = [
    "CHILDREN_COUNT_KEY_PREFIX",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DIRECTORY_SUMMARY_MAX_TOKENS",
    "FILE_SUMMARY_MAX_TOKENS",
    "GITHUB_API_BASE_URL",
    "GITHUB_HTML_BASE_URL",
    "GROQ_API_BASE_URL",
    "GROQ_MODEL",
    "KEY_FIELD_SEPARATOR",
    "LOCAL_CACHE_MAX_ENTRIES",
    "OPENAI_API_BASE_URL",
    "OPENAI_MODEL",
    "PERCENTAGE_MULTIPLIER",
    "PROVIDER_CALL_DELAY_SECONDS",
    "SUMMARY_KEY_PREFIX",
    "SUMMARY_TEMPERATURE",
    "SUMMARY_TTL_SECONDS",
]
