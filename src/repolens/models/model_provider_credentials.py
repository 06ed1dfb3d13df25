# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Per-provider API credentials."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from repolens.enums.enum_summary_provider import EnumSummaryProvider


class ModelProviderCredentials(BaseModel):
    """API keys for the generation providers.

    Either key may be absent; the generator only requires the key of the
    provider it is asked to use.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    groq_api_key: SecretStr | None = Field(default=None)
    openai_api_key: SecretStr | None = Field(default=None)

    def key_for(self, provider: EnumSummaryProvider) -> str:
        """Return the key for ``provider``, or ``""`` when none is set."""
        secret = (
            self.groq_api_key
            if provider is EnumSummaryProvider.GROQ
            else self.openai_api_key
        )
        return secret.get_secret_value().strip() if secret is not None else ""

    @classmethod
    def for_provider(
        cls, provider: EnumSummaryProvider, api_key: str | None
    ) -> ModelProviderCredentials:
        field = "groq_api_key" if provider is EnumSummaryProvider.GROQ else "openai_api_key"
        return cls.model_validate({field: api_key})


__all__ = ["ModelProviderCredentials"]
