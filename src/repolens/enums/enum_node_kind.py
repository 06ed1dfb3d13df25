# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Node kind enum for repository tree snapshots.

The string values double as the ``kind`` segment of summary cache keys,
so they must stay lowercase and stable.
"""

from __future__ import annotations

from enum import Enum


class EnumNodeKind(str, Enum):
    """Whether a repository tree node is a file or a directory.

    Example:
        >>> from repolens.enums import EnumNodeKind
        >>> EnumNodeKind("directory") is EnumNodeKind.DIRECTORY
        True
    """

    FILE = "file"
    DIRECTORY = "directory"


__all__ = ["EnumNodeKind"]
