# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Pending summary updates for one repository.

Nodes that changed since their summary was generated wait here until they
are re-summarized. Entries are keyed by display key (``owner/repo:path``) and
the whole set serializes to JSON so a caller can keep it across sessions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field

from repolens.cache.cache_keys import display_key
from repolens.enums.enum_change_type import EnumChangeType
from repolens.models.model_repo_change import ModelRepoChange
from repolens.models.model_repo_node import ModelRepoNode

logger = logging.getLogger(__name__)


class ModelPendingUpdatesSnapshot(BaseModel):
    """Serialized form of ``PendingUpdates``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner: str
    repo: str
    entries: dict[str, ModelRepoNode] = Field(default_factory=dict)


class PendingUpdates:
    """Added and updated nodes of one repository awaiting re-summarization."""

    def __init__(self, owner: str, repo: str) -> None:
        self.owner = owner
        self.repo = repo
        self._entries: dict[str, ModelRepoNode] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self._key(path) in self._entries

    def __iter__(self) -> Iterator[ModelRepoNode]:
        return iter(list(self._entries.values()))

    def _key(self, path: str) -> str:
        return display_key(self.owner, self.repo, path)

    def matches(self, owner: str, repo: str) -> bool:
        return self.owner == owner and self.repo == repo

    @property
    def paths(self) -> list[str]:
        return [node.path for node in self._entries.values()]

    def as_changes(self) -> list[ModelRepoChange]:
        """Pending entries as UPDATED changes, ready for ``apply_changes``."""
        return [
            ModelRepoChange(change_type=EnumChangeType.UPDATED, node=node)
            for node in self._entries.values()
        ]

    def record_changes(self, changes: Iterable[ModelRepoChange]) -> int:
        """Add added/updated nodes; drop entries whose node was deleted.

        Returns:
            Number of entries added or replaced.
        """
        recorded = 0
        for change in changes:
            key = self._key(change.path)
            if change.change_type is EnumChangeType.DELETED:
                self._entries.pop(key, None)
            else:
                self._entries[key] = change.node
                recorded += 1
        return recorded

    def resolve(self, paths: Iterable[str]) -> int:
        """Remove entries for ``paths``; unknown paths are ignored.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for path in paths:
            if self._entries.pop(self._key(path), None) is not None:
                removed += 1
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def dump(self) -> str:
        return ModelPendingUpdatesSnapshot(
            owner=self.owner, repo=self.repo, entries=dict(self._entries)
        ).model_dump_json()

    @classmethod
    def load(cls, data: str | bytes) -> PendingUpdates:
        """Restore from ``dump()`` output.

        Raises:
            pydantic.ValidationError: If ``data`` is not a valid snapshot.
        """
        snapshot = ModelPendingUpdatesSnapshot.model_validate_json(data)
        pending = cls(snapshot.owner, snapshot.repo)
        pending._entries = dict(snapshot.entries)
        logger.debug(
            "Loaded %d pending updates for %s/%s", len(pending), pending.owner, pending.repo
        )
        return pending


__all__ = ["ModelPendingUpdatesSnapshot", "PendingUpdates"]
