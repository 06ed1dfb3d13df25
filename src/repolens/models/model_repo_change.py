# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Output unit of the tree differ."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from repolens.enums.enum_change_type import EnumChangeType
from repolens.models.model_repo_node import ModelRepoNode


class ModelRepoChange(BaseModel):
    """One added, updated or deleted node.

    For ADDED and UPDATED the node comes from the current snapshot, for
    DELETED from the previous one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    change_type: EnumChangeType
    node: ModelRepoNode

    @property
    def path(self) -> str:
        return self.node.path


__all__ = ["ModelRepoChange"]
