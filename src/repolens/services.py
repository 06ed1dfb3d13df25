# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Wiring of the cache, clients and generator from settings.

One ``RepoLensServices`` bundle is built per process (API lifespan or CLI
invocation) and closed on shutdown.
"""

from __future__ import annotations

import dataclasses
import logging

from repolens.cache.protocols import ProtocolKeyValueStore
from repolens.cache.store_memory import InMemoryKeyValueStore
from repolens.cache.store_redis import RedisKeyValueStore
from repolens.cache.summary_cache import SummaryCacheStore
from repolens.clients.client_chat_completion import ChatCompletionClient
from repolens.clients.client_github import GitHubContentClient
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.models.model_provider_credentials import ModelProviderCredentials
from repolens.models.model_repo_reference import ModelRepoReference
from repolens.reconcile.engine import BatchReconciler
from repolens.settings import RepoLensSettings
from repolens.summaries.generator import CredentialsInput, SummaryGenerator

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class RepoLensServices:
    """Long-lived collaborators shared by request handlers and CLI commands."""

    settings: RepoLensSettings
    cache: SummaryCacheStore
    github: GitHubContentClient
    chat: ChatCompletionClient
    generator: SummaryGenerator

    @property
    def credentials(self) -> ModelProviderCredentials:
        return self.settings.to_credentials()

    def reconciler(
        self,
        repo: ModelRepoReference,
        provider: EnumSummaryProvider | None = None,
        credentials: CredentialsInput = None,
    ) -> BatchReconciler:
        return BatchReconciler(
            self.generator,
            self.github,
            repo,
            credentials if credentials is not None else self.credentials,
            provider=provider or self.settings.default_provider,
            call_delay_seconds=self.settings.provider_call_delay_seconds,
        )

    async def close(self) -> None:
        await self.github.close()
        await self.chat.close()
        await self.cache.close()


def create_store(settings: RepoLensSettings) -> ProtocolKeyValueStore:
    """Redis store when ``redis_url`` is set, otherwise process memory."""
    if settings.redis_url is not None:
        return RedisKeyValueStore.from_url(settings.redis_url.get_secret_value())
    logger.warning("REPOLENS_REDIS_URL is not set; summaries are cached in memory only")
    return InMemoryKeyValueStore()


def build_services(
    settings: RepoLensSettings,
    *,
    store: ProtocolKeyValueStore | None = None,
) -> RepoLensServices:
    cache = SummaryCacheStore(
        store if store is not None else create_store(settings),
        ttl_seconds=settings.summary_ttl_seconds,
        local_max_entries=settings.local_cache_max_entries,
    )
    github = GitHubContentClient(
        settings.github_token_value(),
        base_url=settings.github_api_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
    chat = ChatCompletionClient(timeout_seconds=settings.http_timeout_seconds)
    generator = SummaryGenerator(cache, chat, settings.summary_ttl_seconds)
    return RepoLensServices(
        settings=settings, cache=cache, github=github, chat=chat, generator=generator
    )


__all__ = ["RepoLensServices", "build_services", "create_store"]
