# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Generation provider enum."""

from __future__ import annotations

from enum import Enum


class EnumSummaryProvider(str, Enum):
    """Chat-completion backends able to produce summaries.

    The value is persisted in cached summary records; it tags which backend
    produced a summary and carries no other meaning.
    """

    GROQ = "groq"
    OPENAI = "openai"

    @property
    def label(self) -> str:
        """Human-readable provider name used in error messages."""
        return "Groq" if self is EnumSummaryProvider.GROQ else "OpenAI"


__all__ = ["EnumSummaryProvider"]
