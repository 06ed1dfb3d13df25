# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Snapshot differ for repository trees.

Compares two snapshots of the same repository by path. A file counts as
updated only when its byte size differs; a content change that preserves the
size goes undetected. Directories are never reported as updated, only as
added or deleted.

The differ does not check that both snapshots belong to the same repository;
callers gate with ``same_repository`` first.
"""

from __future__ import annotations

from repolens.enums.enum_change_type import EnumChangeType
from repolens.models.model_repo_change import ModelRepoChange
from repolens.models.model_repo_node import ModelRepoNode
from repolens.models.model_repo_reference import ModelRepoReference


def flatten_tree(root: ModelRepoNode) -> dict[str, ModelRepoNode]:
    """Map every path in the snapshot (root included) to its node."""
    return {node.path: node for node in root.iter_nodes()}


def detect_changes(
    current: ModelRepoNode | None, previous: ModelRepoNode | None
) -> list[ModelRepoChange]:
    """Return the added, updated and deleted nodes between two snapshots.

    Either snapshot missing yields no changes. The order of the result is
    unspecified.
    """
    if current is None or previous is None:
        return []

    current_nodes = flatten_tree(current)
    previous_nodes = flatten_tree(previous)
    changes: list[ModelRepoChange] = []

    for path, node in current_nodes.items():
        before = previous_nodes.get(path)
        if before is None:
            changes.append(ModelRepoChange(change_type=EnumChangeType.ADDED, node=node))
        elif node.is_file and before.is_file and node.size != before.size:
            changes.append(ModelRepoChange(change_type=EnumChangeType.UPDATED, node=node))

    for path, node in previous_nodes.items():
        if path not in current_nodes:
            changes.append(ModelRepoChange(change_type=EnumChangeType.DELETED, node=node))

    return changes


def split_changes(
    changes: list[ModelRepoChange],
) -> tuple[list[ModelRepoNode], list[ModelRepoNode]]:
    """Split into (nodes to re-summarize, deleted nodes)."""
    to_update = [
        change.node
        for change in changes
        if change.change_type in (EnumChangeType.ADDED, EnumChangeType.UPDATED)
    ]
    deleted = [
        change.node for change in changes if change.change_type is EnumChangeType.DELETED
    ]
    return to_update, deleted


def same_repository(a: ModelRepoReference, b: ModelRepoReference) -> bool:
    """True when both references name the same repository (branch ignored).

    GitHub owner and repository names are case-insensitive.
    """
    return a.owner.lower() == b.owner.lower() and a.repo.lower() == b.repo.lower()


__all__ = ["detect_changes", "flatten_tree", "same_repository", "split_changes"]
