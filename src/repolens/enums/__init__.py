"""
Enums for repolens.

    from repolens.enums import (
        EnumBatchState,
        EnumChangeType,
        EnumItemOutcome,
        EnumNodeKind,
        EnumSummaryProvider,
    )
"""

from repolens.enums.enum_batch import EnumBatchState, EnumItemOutcome
from repolens.enums.enum_change_type import EnumChangeType
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.enums.enum_summary_provider import EnumSummaryProvider

__all__ = [
    "EnumBatchState",
    "EnumChangeType",
    "EnumItemOutcome",
    "EnumNodeKind",
    "EnumSummaryProvider",
]
