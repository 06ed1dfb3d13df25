# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Structured cache keys for summary records.

Two key families share one store:

    summary:{owner}/{repo}:{path}:{kind}
    summarized-children:{owner}/{repo}:{path}

Keys are reversible: ``decode(encode(k)) == k`` for every valid key. Fields
are separated by ``:``, so owner, repo and path must not contain it; repo
paths containing ``:`` cannot be cached. Owner and repo additionally must not
contain ``/``. Both restrictions are enforced at construction time.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from repolens.constants import (
    CHILDREN_COUNT_KEY_PREFIX,
    KEY_FIELD_SEPARATOR,
    SUMMARY_KEY_PREFIX,
)
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.exceptions import InvalidCacheKeyError

_REPO_SEPARATOR = "/"


def _check_repo_segment(value: str) -> str:
    if not value:
        raise ValueError("must not be empty")
    if KEY_FIELD_SEPARATOR in value or _REPO_SEPARATOR in value:
        raise ValueError(
            f"must not contain {KEY_FIELD_SEPARATOR!r} or {_REPO_SEPARATOR!r}: {value!r}"
        )
    return value


def _check_path(value: str) -> str:
    if KEY_FIELD_SEPARATOR in value:
        raise ValueError(
            f"paths containing {KEY_FIELD_SEPARATOR!r} cannot be cached: {value!r}"
        )
    return value


def _split_repo(segment: str, key: str) -> tuple[str, str]:
    parts = segment.split(_REPO_SEPARATOR)
    if len(parts) != 2:
        raise InvalidCacheKeyError(f"Malformed owner/repo segment in key {key!r}")
    return parts[0], parts[1]


class ModelSummaryKey(BaseModel):
    """Composite key ``(owner, repo, path, kind)`` of one summary record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner: str
    repo: str
    path: str = Field(default="")
    kind: EnumNodeKind

    @field_validator("owner", "repo")
    @classmethod
    def _validate_repo_segment(cls, value: str) -> str:
        return _check_repo_segment(value)

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: str) -> str:
        return _check_path(value)

    @classmethod
    def build(
        cls, owner: str, repo: str, path: str, kind: EnumNodeKind | str
    ) -> ModelSummaryKey:
        """Construct a key, raising ``InvalidCacheKeyError`` instead of ValidationError."""
        try:
            return cls(owner=owner, repo=repo, path=path, kind=kind)
        except ValidationError as exc:
            raise InvalidCacheKeyError(str(exc)) from exc

    def encode(self) -> str:
        return KEY_FIELD_SEPARATOR.join(
            (
                SUMMARY_KEY_PREFIX,
                f"{self.owner}{_REPO_SEPARATOR}{self.repo}",
                self.path,
                self.kind.value,
            )
        )

    @classmethod
    def decode(cls, key: str) -> ModelSummaryKey:
        """Recover the composite key from its encoded form.

        Raises:
            InvalidCacheKeyError: On wrong prefix, wrong field count or unknown kind.
        """
        parts = key.split(KEY_FIELD_SEPARATOR)
        if len(parts) != 4 or parts[0] != SUMMARY_KEY_PREFIX:
            raise InvalidCacheKeyError(f"Not a summary key: {key!r}")
        owner, repo = _split_repo(parts[1], key)
        try:
            kind = EnumNodeKind(parts[3])
        except ValueError as exc:
            raise InvalidCacheKeyError(f"Unknown kind in key {key!r}") from exc
        return cls.build(owner, repo, parts[2], kind)

    @property
    def display_key(self) -> str:
        return display_key(self.owner, self.repo, self.path)

    def children_count_key(self) -> ModelChildrenCountKey:
        return ModelChildrenCountKey.build(self.owner, self.repo, self.path)


class ModelChildrenCountKey(BaseModel):
    """Key of the children-summarized-count record of one directory."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner: str
    repo: str
    path: str = Field(default="")

    @field_validator("owner", "repo")
    @classmethod
    def _validate_repo_segment(cls, value: str) -> str:
        return _check_repo_segment(value)

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: str) -> str:
        return _check_path(value)

    @classmethod
    def build(cls, owner: str, repo: str, path: str) -> ModelChildrenCountKey:
        try:
            return cls(owner=owner, repo=repo, path=path)
        except ValidationError as exc:
            raise InvalidCacheKeyError(str(exc)) from exc

    def encode(self) -> str:
        return KEY_FIELD_SEPARATOR.join(
            (
                CHILDREN_COUNT_KEY_PREFIX,
                f"{self.owner}{_REPO_SEPARATOR}{self.repo}",
                self.path,
            )
        )

    @classmethod
    def decode(cls, key: str) -> ModelChildrenCountKey:
        parts = key.split(KEY_FIELD_SEPARATOR)
        if len(parts) != 3 or parts[0] != CHILDREN_COUNT_KEY_PREFIX:
            raise InvalidCacheKeyError(f"Not a children-count key: {key!r}")
        owner, repo = _split_repo(parts[1], key)
        return cls.build(owner, repo, parts[2])

    @property
    def display_key(self) -> str:
        return display_key(self.owner, self.repo, self.path)


def summary_key_prefix(owner: str, repo: str) -> str:
    """Glob pattern matching every summary key of one repository."""
    _check_prefix_args(owner, repo)
    return (
        f"{SUMMARY_KEY_PREFIX}{KEY_FIELD_SEPARATOR}"
        f"{owner}{_REPO_SEPARATOR}{repo}{KEY_FIELD_SEPARATOR}*"
    )


def children_count_key_prefix(owner: str, repo: str) -> str:
    """Glob pattern matching every children-count key of one repository."""
    _check_prefix_args(owner, repo)
    return (
        f"{CHILDREN_COUNT_KEY_PREFIX}{KEY_FIELD_SEPARATOR}"
        f"{owner}{_REPO_SEPARATOR}{repo}{KEY_FIELD_SEPARATOR}*"
    )


def display_key(owner: str, repo: str, path: str) -> str:
    """Key used by bulk-hydrate maps and pending updates: ``owner/repo:path``."""
    return f"{owner}{_REPO_SEPARATOR}{repo}{KEY_FIELD_SEPARATOR}{path}"


def _check_prefix_args(owner: str, repo: str) -> None:
    try:
        _check_repo_segment(owner)
        _check_repo_segment(repo)
    except ValueError as exc:
        raise InvalidCacheKeyError(str(exc)) from exc


__all__ = [
    "ModelChildrenCountKey",
    "ModelSummaryKey",
    "children_count_key_prefix",
    "display_key",
    "summary_key_prefix",
]
