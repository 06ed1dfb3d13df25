# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Cache-first summary generation.

``SummaryGenerator`` produces file summaries and directory roll-ups. With
repository context (owner, repo and a non-empty path) every call consults the
summary cache first and writes the result back; without it the provider is
always called and nothing is cached.

Failure handling:
    - Unsummarizable files, missing credentials and empty directories are
      rejected before any network call.
    - Provider failures propagate as ``GenerationFailedError``.
    - Cache failures never propagate: a failed read is a miss, a failed
      write is logged and the fresh summary is still returned.

Example:
    ```python
    generator = SummaryGenerator(cache, ChatCompletionClient())
    record = await generator.summarize_file(
        source, "main.py", credentials, owner="octo", repo="demo", path="src/main.py"
    )
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import SecretStr

from repolens.cache.cache_keys import ModelChildrenCountKey, ModelSummaryKey
from repolens.cache.summary_cache import SummaryCacheStore
from repolens.clients.protocols import ProtocolCompletionProvider
from repolens.constants import (
    DIRECTORY_SUMMARY_MAX_TOKENS,
    FILE_SUMMARY_MAX_TOKENS,
    SUMMARY_TEMPERATURE,
)
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.exceptions import (
    InvalidCacheKeyError,
    MissingCredentialsError,
    NoChildSummariesError,
    UnsummarizableError,
)
from repolens.models.model_child_summary import ModelChildSummary
from repolens.models.model_provider_credentials import ModelProviderCredentials
from repolens.models.model_summary_record import ModelSummaryRecord
from repolens.summaries.prompts import (
    DIRECTORY_SYSTEM_PROMPT,
    FILE_SYSTEM_PROMPT,
    build_directory_prompt,
    build_file_prompt,
)
from repolens.summaries.summarizability import is_summarizable

logger = logging.getLogger(__name__)

CredentialsInput = ModelProviderCredentials | SecretStr | str | None


def resolve_api_key(credentials: CredentialsInput, provider: EnumSummaryProvider) -> str:
    """Return the key for ``provider`` or raise ``MissingCredentialsError``.

    ``credentials`` may be per-provider credentials or a bare key for the
    selected provider.
    """
    if isinstance(credentials, ModelProviderCredentials):
        api_key = credentials.key_for(provider)
    elif isinstance(credentials, SecretStr):
        api_key = credentials.get_secret_value().strip()
    else:
        api_key = (credentials or "").strip()
    if not api_key:
        raise MissingCredentialsError(provider.value)
    return api_key


class SummaryGenerator:
    """Produces summaries through a completion provider, cache-first.

    Args:
        cache: Shared summary cache.
        provider_client: Chat-completion transport.
        ttl_seconds: TTL for written records; defaults to the cache's TTL.
    """

    def __init__(
        self,
        cache: SummaryCacheStore,
        provider_client: ProtocolCompletionProvider,
        ttl_seconds: int | None = None,
    ) -> None:
        self._cache = cache
        self._provider_client = provider_client
        self._ttl_seconds = ttl_seconds if ttl_seconds is not None else cache.ttl_seconds

    @property
    def cache(self) -> SummaryCacheStore:
        return self._cache

    @property
    def provider_client(self) -> ProtocolCompletionProvider:
        return self._provider_client

    async def summarize_file(
        self,
        content: str,
        file_name: str,
        credentials: CredentialsInput,
        provider: EnumSummaryProvider = EnumSummaryProvider.GROQ,
        owner: str | None = None,
        repo: str | None = None,
        path: str | None = None,
        force_refresh: bool = False,
    ) -> ModelSummaryRecord:
        """Summarize one file.

        Raises:
            UnsummarizableError: ``file_name`` is not eligible.
            MissingCredentialsError: No key for ``provider`` (checked after the
                cache lookup, before any provider call).
            GenerationFailedError: The provider call failed.
        """
        if not is_summarizable(file_name):
            raise UnsummarizableError(file_name)

        key = _summary_key(owner, repo, path, EnumNodeKind.FILE)
        if key is not None and not force_refresh:
            cached = await self._cache.get_summary(key)
            if cached is not None:
                return cached

        api_key = resolve_api_key(credentials, provider)
        logger.info("Generating summary for file %s with %s", path or file_name, provider.label)
        text = await self._provider_client.complete(
            FILE_SYSTEM_PROMPT,
            build_file_prompt(file_name, content),
            api_key=api_key,
            provider=provider,
            max_tokens=FILE_SUMMARY_MAX_TOKENS,
            temperature=SUMMARY_TEMPERATURE,
        )
        record = ModelSummaryRecord(
            text=text, generated_at=datetime.now(UTC), provider=provider
        )
        if key is not None:
            await self._cache.put_summary(key, record, self._ttl_seconds)
        return record

    async def summarize_directory(
        self,
        name: str,
        path: str,
        child_summaries: Sequence[ModelChildSummary],
        credentials: CredentialsInput,
        provider: EnumSummaryProvider = EnumSummaryProvider.GROQ,
        owner: str | None = None,
        repo: str | None = None,
        force_refresh: bool = False,
    ) -> ModelSummaryRecord:
        """Roll up already-summarized descendants into a directory summary.

        Does not recurse: callers gather ``child_summaries`` themselves.

        Raises:
            NoChildSummariesError: ``child_summaries`` is empty.
            MissingCredentialsError: No key for ``provider``.
            GenerationFailedError: The provider call failed.
        """
        if not child_summaries:
            raise NoChildSummariesError(path)

        key = _summary_key(owner, repo, path, EnumNodeKind.DIRECTORY)
        if key is not None and not force_refresh:
            cached = await self._cache.get_summary(key)
            if cached is not None:
                return cached

        api_key = resolve_api_key(credentials, provider)
        logger.info(
            "Generating summary for directory %s from %d children with %s",
            path or name,
            len(child_summaries),
            provider.label,
        )
        text = await self._provider_client.complete(
            DIRECTORY_SYSTEM_PROMPT,
            build_directory_prompt(name, path, child_summaries),
            api_key=api_key,
            provider=provider,
            max_tokens=DIRECTORY_SUMMARY_MAX_TOKENS,
            temperature=SUMMARY_TEMPERATURE,
        )
        record = ModelSummaryRecord(
            text=text, generated_at=datetime.now(UTC), provider=provider
        )
        if key is not None:
            await self._cache.put_summary(key, record, self._ttl_seconds)
            await self._cache.put_children_count(
                ModelChildrenCountKey.build(key.owner, key.repo, key.path),
                len(child_summaries),
                self._ttl_seconds,
            )
        return record


def _summary_key(
    owner: str | None, repo: str | None, path: str | None, kind: EnumNodeKind
) -> ModelSummaryKey | None:
    """Return the cache key, or None when the call carries no repository context."""
    if not (owner and repo and path):
        return None
    try:
        return ModelSummaryKey.build(owner, repo, path, kind)
    except InvalidCacheKeyError as exc:
        logger.warning("Summary for %r will not be cached: %s", path, exc)
        return None


__all__ = ["CredentialsInput", "SummaryGenerator", "resolve_api_key"]
