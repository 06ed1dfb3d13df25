# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Validated ``owner/repo`` reference."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from repolens.exceptions import InvalidRepoReferenceError

# GitHub owner and repository names: letters, digits, '-', '_' and '.'.
_NAME_PATTERN = r"^[A-Za-z0-9_.-]+$"
_NAME_RE = re.compile(_NAME_PATTERN)


class ModelRepoReference(BaseModel):
    """Identity of one GitHub repository, optionally pinned to a branch.

    Attributes:
        owner: Account or organization name.
        repo: Repository name.
        branch: Branch to read from; None means "the default branch".
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner: str = Field(..., min_length=1, pattern=_NAME_PATTERN)
    repo: str = Field(..., min_length=1, pattern=_NAME_PATTERN)
    branch: str | None = Field(default=None, min_length=1)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, identifier: str, branch: str | None = None) -> ModelRepoReference:
        """Parse ``owner/repo``.

        Raises:
            InvalidRepoReferenceError: If the identifier is not exactly two
                non-empty segments made of GitHub-legal characters.
        """
        parts = identifier.strip().split("/") if identifier else []
        if len(parts) != 2 or not all(_NAME_RE.match(part) for part in parts):
            raise InvalidRepoReferenceError(
                f'Invalid repository format: {identifier!r}. Use "username/repo"'
            )
        try:
            return cls(owner=parts[0], repo=parts[1], branch=branch or None)
        except ValidationError as exc:
            raise InvalidRepoReferenceError(str(exc)) from exc

    def with_branch(self, branch: str) -> ModelRepoReference:
        return self.model_copy(update={"branch": branch})


__all__ = ["ModelRepoReference"]
