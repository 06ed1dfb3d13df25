# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Protocols for the external collaborators of the generator and the engine.

Implemented by ``ChatCompletionClient`` and ``GitHubContentClient``; tests
substitute fakes or ``AsyncMock`` objects.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from repolens.enums.enum_summary_provider import EnumSummaryProvider


@runtime_checkable
class ProtocolCompletionProvider(Protocol):
    """Produces one chat completion from a system and a user prompt."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        api_key: str,
        provider: EnumSummaryProvider,
        max_tokens: int,
        temperature: float = ...,
    ) -> str:
        """Return the completion text.

        Raises:
            GenerationFailedError: On any provider or transport failure.
        """
        ...


@runtime_checkable
class ProtocolContentFetcher(Protocol):
    """Fetches the current content of one file of a repository."""

    async def fetch_file_content(
        self, owner: str, repo: str, path: str, branch: str | None = None
    ) -> str:
        """Return the file content.

        Raises:
            ContentFetchError: On non-2xx response or transport failure.
        """
        ...


__all__ = ["ProtocolCompletionProvider", "ProtocolContentFetcher"]
