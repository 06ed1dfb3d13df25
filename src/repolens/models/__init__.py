"""Domain models for repolens.

All models are frozen Pydantic models; trees, summaries, changes and batch
results flow between layers as these types.
"""

from repolens.models.model_batch import (
    ModelBatchDeleteResult,
    ModelBatchProgress,
    ModelBatchResult,
    ModelItemResult,
)
from repolens.models.model_child_summary import ModelChildSummary
from repolens.models.model_provider_credentials import ModelProviderCredentials
from repolens.models.model_repo_change import ModelRepoChange
from repolens.models.model_repo_node import PATH_SEPARATOR, ModelRepoNode
from repolens.models.model_repo_reference import ModelRepoReference
from repolens.models.model_summary_record import ModelSummaryRecord

__all__ = [
    "PATH_SEPARATOR",
    "ModelBatchDeleteResult",
    "ModelBatchProgress",
    "ModelBatchResult",
    "ModelChildSummary",
    "ModelItemResult",
    "ModelProviderCredentials",
    "ModelRepoChange",
    "ModelRepoNode",
    "ModelRepoReference",
    "ModelSummaryRecord",
]
