# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Input unit of a directory roll-up summary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from repolens.enums.enum_node_kind import EnumNodeKind


class ModelChildSummary(BaseModel):
    """An already-summarized descendant of the directory being rolled up."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: EnumNodeKind
    name: str = Field(..., min_length=1)
    path: str
    summary: str


__all__ = ["ModelChildSummary"]
