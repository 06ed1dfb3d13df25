# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Progress and result models for batch reconciliation and batch deletes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from repolens.constants import PERCENTAGE_MULTIPLIER
from repolens.enums.enum_batch import EnumBatchState, EnumItemOutcome
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.models.model_summary_record import ModelSummaryRecord


class ModelBatchProgress(BaseModel):
    """Progress event emitted after every processed item.

    Attributes:
        processed: Items handled so far (success, failure or skip).
        total: Fixed at the start of the run.
        current_path: Path of the item just handled.
        percent: ``processed / total`` as a percentage.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    processed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    current_path: str
    percent: float = Field(..., ge=0.0, le=100.0)

    @classmethod
    def at(cls, processed: int, total: int, current_path: str) -> ModelBatchProgress:
        percent = (processed / total) * PERCENTAGE_MULTIPLIER if total else 100.0
        return cls(
            processed=processed,
            total=total,
            current_path=current_path,
            percent=percent,
        )


class ModelItemResult(BaseModel):
    """Outcome for one selected node."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    kind: EnumNodeKind
    outcome: EnumItemOutcome
    from_cache: bool = False
    error: str | None = None


class ModelBatchResult(BaseModel):
    """Final tally of a reconciliation run.

    ``summaries`` holds every summary known at the end of the run keyed by
    display key (``owner/repo:path``), including entries produced by the
    directory recovery path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: EnumBatchState
    total: int = 0
    processed: int = 0
    items: tuple[ModelItemResult, ...] = ()
    summaries: dict[str, ModelSummaryRecord] = Field(default_factory=dict)

    def _count(self, outcome: EnumItemOutcome) -> int:
        return sum(1 for item in self.items if item.outcome is outcome)

    @property
    def summarized(self) -> int:
        return self._count(EnumItemOutcome.SUMMARIZED)

    @property
    def cached(self) -> int:
        return self._count(EnumItemOutcome.CACHED)

    @property
    def skipped(self) -> int:
        return self._count(EnumItemOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(EnumItemOutcome.FAILED)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def paths_with(self, *outcomes: EnumItemOutcome) -> list[str]:
        return [item.path for item in self.items if item.outcome in outcomes]


class ModelBatchDeleteResult(BaseModel):
    """Aggregate result of a fan-out delete. Not transactional."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    deleted: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return not self.failed


__all__ = [
    "ModelBatchDeleteResult",
    "ModelBatchProgress",
    "ModelBatchResult",
    "ModelItemResult",
]
