# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Change classification produced by the tree differ."""

from __future__ import annotations

from enum import Enum


class EnumChangeType(str, Enum):
    """How a path differs between two snapshots of the same repository.

    Attributes:
        ADDED: Present in the current snapshot only.
        UPDATED: A file present in both snapshots whose size changed.
        DELETED: Present in the previous snapshot only.
    """

    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"


__all__ = ["EnumChangeType"]
