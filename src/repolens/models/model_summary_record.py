# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Summary record model.

A summary record is what the cache stores for one file or directory. The
cache payload keeps the field names already present in deployed caches
(``summary``, ``generatedAt``, ``provider``) so existing entries stay
readable. ``from_cache`` is derived on read and never written.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from repolens.enums.enum_summary_provider import EnumSummaryProvider


class ModelSummaryRecord(BaseModel):
    """Generated natural-language summary for one repository node.

    Attributes:
        text: The summary text.
        generated_at: When the summary was generated (UTC).
        provider: Backend that produced the summary.
        from_cache: True when served from the cache instead of generated.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    text: str = Field(..., description="Generated summary text")
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Generation timestamp (UTC)",
    )
    provider: EnumSummaryProvider = Field(..., description="Generation backend")
    from_cache: bool = Field(
        default=False, description="Served from cache (never persisted)"
    )

    def to_cache_payload(self) -> dict[str, Any]:
        """Return the persisted representation (without ``from_cache``)."""
        return {
            "summary": self.text,
            "generatedAt": self.generated_at.isoformat(),
            "provider": self.provider.value,
        }

    def to_cache_json(self) -> str:
        return json.dumps(self.to_cache_payload())

    @classmethod
    def from_cache_payload(cls, payload: str | bytes | dict[str, Any]) -> ModelSummaryRecord:
        """Build a record read from the cache, flagged ``from_cache=True``.

        Raises:
            ValueError: If the payload is not valid JSON or lacks required fields.
        """
        data = json.loads(payload) if isinstance(payload, str | bytes) else payload
        if not isinstance(data, dict):
            raise ValueError(f"Summary payload must be an object, got {type(data).__name__}")
        return cls.model_validate(
            {
                "text": data.get("summary"),
                "generated_at": data.get("generatedAt"),
                "provider": data.get("provider"),
                "from_cache": True,
            }
        )

    def as_cached(self) -> ModelSummaryRecord:
        return self.model_copy(update={"from_cache": True})


__all__ = ["ModelSummaryRecord"]
