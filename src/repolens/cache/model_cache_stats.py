# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Cache statistics models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelCacheStats(BaseModel):
    """Running counters of one ``SummaryCacheStore`` instance."""

    hits: int = Field(default=0, description="Summary lookups served from cache")
    local_hits: int = Field(default=0, description="Hits served by the in-process tier")
    misses: int = Field(default=0, description="Summary lookups that found nothing")
    read_failures: int = Field(default=0, description="Remote reads that failed")
    writes: int = Field(default=0, description="Successful remote writes")
    write_failures: int = Field(default=0, description="Remote writes that failed")
    deletes: int = Field(default=0, description="Successful deletes")

    @property
    def total_lookups(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        if self.total_lookups == 0:
            return 0.0
        return self.hits / self.total_lookups


class ModelCacheSummaryCounts(BaseModel):
    """How many summaries one repository has cached, by node kind."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int = 0
    files: int = 0
    directories: int = 0


__all__ = ["ModelCacheStats", "ModelCacheSummaryCounts"]
