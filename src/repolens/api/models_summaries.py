# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Request and response models for the summaries API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.models.model_child_summary import ModelChildSummary
from repolens.models.model_repo_change import ModelRepoChange
from repolens.models.model_repo_node import ModelRepoNode
from repolens.models.model_summary_record import ModelSummaryRecord


class ModelSummaryResponse(BaseModel):
    """One summary as returned to API callers."""

    model_config = ConfigDict(frozen=True)

    path: str
    summary: str
    generated_at: datetime
    provider: EnumSummaryProvider
    from_cache: bool

    @classmethod
    def from_record(cls, path: str, record: ModelSummaryRecord) -> ModelSummaryResponse:
        return cls(
            path=path,
            summary=record.text,
            generated_at=record.generated_at,
            provider=record.provider,
            from_cache=record.from_cache,
        )


class _ModelGenerationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    provider: EnumSummaryProvider | None = Field(
        default=None, description="Generation backend; server default when omitted"
    )
    api_key: SecretStr | None = Field(
        default=None, description="Key for the provider; server key when omitted"
    )
    force_refresh: bool = Field(default=False, description="Bypass the cache lookup")


class ModelFileSummaryRequest(_ModelGenerationRequest):
    path: str = Field(..., min_length=1, description="File path within the repository")
    branch: str | None = Field(
        default=None, description="Branch to read; default branch when omitted"
    )


class ModelDirectorySummaryRequest(_ModelGenerationRequest):
    path: str = Field(..., description="Directory path; empty for the root")
    name: str = Field(..., min_length=1, description="Directory display name")
    child_summaries: list[ModelChildSummary] = Field(default_factory=list)


class ModelCachedSummariesResponse(BaseModel):
    owner: str
    repo: str
    count: int
    summaries: dict[str, ModelSummaryResponse]


class ModelChildrenCountsResponse(BaseModel):
    owner: str
    repo: str
    counts: dict[str, int]


class ModelDeleteItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str
    kind: EnumNodeKind


class ModelDeleteSummariesRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[ModelDeleteItem] = Field(..., min_length=1)


class ModelDeleteSummariesResponse(BaseModel):
    success: bool
    deleted: list[str]
    failed: list[str]


class ModelDiffRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    current: ModelRepoNode | None = None
    previous: ModelRepoNode | None = None


class ModelDiffResponse(BaseModel):
    added: int
    updated: int
    deleted: int
    changes: list[ModelRepoChange]


class ModelSummarizableResponse(BaseModel):
    name: str
    summarizable: bool


__all__ = [
    "ModelCachedSummariesResponse",
    "ModelChildrenCountsResponse",
    "ModelDeleteItem",
    "ModelDeleteSummariesRequest",
    "ModelDeleteSummariesResponse",
    "ModelDiffRequest",
    "ModelDiffResponse",
    "ModelDirectorySummaryRequest",
    "ModelFileSummaryRequest",
    "ModelSummarizableResponse",
    "ModelSummaryResponse",
]
