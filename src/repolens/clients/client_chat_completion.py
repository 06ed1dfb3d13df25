# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""OpenAI-compatible chat-completions client.

Both supported providers speak the same ``/chat/completions`` wire format;
only the base URL and model differ. Transport layer only: prompts are built
by ``repolens.summaries.prompts`` and caching is the generator's concern.

Example:
    ```python
    async with ChatCompletionClient() as client:
        text = await client.complete(
            FILE_SYSTEM_PROMPT,
            build_file_prompt("main.py", source),
            api_key=key,
            provider=EnumSummaryProvider.GROQ,
            max_tokens=FILE_SUMMARY_MAX_TOKENS,
        )
    ```
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, cast

import httpx

from repolens.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    GROQ_API_BASE_URL,
    GROQ_MODEL,
    OPENAI_API_BASE_URL,
    OPENAI_MODEL,
    SUMMARY_TEMPERATURE,
)
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.exceptions import GenerationFailedError
from repolens.utils.log_sanitizer import sanitize_logs

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINTS: dict[EnumSummaryProvider, tuple[str, str]] = {
    EnumSummaryProvider.GROQ: (GROQ_API_BASE_URL, GROQ_MODEL),
    EnumSummaryProvider.OPENAI: (OPENAI_API_BASE_URL, OPENAI_MODEL),
}


class ChatCompletionClient:
    """Async chat-completions client for Groq and OpenAI.

    Keeps one persistent ``httpx.AsyncClient``; supports both context manager
    and manual ``connect()``/``close()`` lifecycle.

    Args:
        timeout_seconds: Per-request timeout.
        endpoints: Override of ``provider -> (base_url, model)``.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        endpoints: dict[EnumSummaryProvider, tuple[str, str]] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._endpoints = {**DEFAULT_ENDPOINTS, **(endpoints or {})}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def endpoint_for(self, provider: EnumSummaryProvider) -> tuple[str, str]:
        """Return ``(base_url, model)`` for ``provider``."""
        base_url, model = self._endpoints[provider]
        return base_url.rstrip("/"), model

    async def connect(self) -> None:
        """Open the connection pool. Idempotent."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_seconds),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            transport=self._transport,
        )
        logger.debug("ChatCompletionClient connected")

    async def close(self) -> None:
        """Close the connection pool. Idempotent."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("ChatCompletionClient connection closed")

    async def __aenter__(self) -> ChatCompletionClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.connect()
        return cast(httpx.AsyncClient, self._client)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        api_key: str,
        provider: EnumSummaryProvider,
        max_tokens: int,
        temperature: float = SUMMARY_TEMPERATURE,
    ) -> str:
        """Request one completion and return the assistant message text.

        Raises:
            GenerationFailedError: On non-2xx status, transport error or a
                response without a message content.
        """
        base_url, model = self.endpoint_for(provider)
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        client = await self._http()
        try:
            response = await client.post(
                f"{base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("%s request failed: %s", provider.label, exc)
            raise GenerationFailedError(
                f"{provider.label} API request failed: {exc}", provider=provider.value
            ) from exc

        if response.is_error:
            message = _error_message(provider, response.text)
            logger.warning(
                "%s API returned %d: %s",
                provider.label,
                response.status_code,
                sanitize_logs(message),
            )
            raise GenerationFailedError(
                message, provider=provider.value, status_code=response.status_code
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise GenerationFailedError(
                f"{provider.label} API returned an unexpected response",
                provider=provider.value,
                status_code=response.status_code,
            ) from exc
        if not isinstance(content, str):
            raise GenerationFailedError(
                f"{provider.label} API returned no summary text",
                provider=provider.value,
                status_code=response.status_code,
            )
        return content

    async def validate_api_key(self, provider: EnumSummaryProvider, api_key: str) -> bool:
        """Return True if ``api_key`` is accepted by the provider's ``/models`` endpoint."""
        if not api_key or not api_key.strip():
            return False
        base_url, _ = self.endpoint_for(provider)
        client = await self._http()
        try:
            response = await client.get(
                f"{base_url}/models",
                headers={"Authorization": f"Bearer {api_key.strip()}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Error validating %s API key: %s", provider.label, exc)
            return False
        return response.is_success


def _error_message(provider: EnumSummaryProvider, body: str) -> str:
    """Extract ``error.message`` from a JSON error body, else wrap the raw body."""
    try:
        data: Any = json.loads(body)
    except ValueError:
        data = None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return str(error["message"])
    return f"{provider.label} API error: {body}"


__all__ = ["DEFAULT_ENDPOINTS", "ChatCompletionClient"]
