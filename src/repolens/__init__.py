# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""repolens - cached LLM summaries for GitHub repository trees.

Quick Start - classify and summarize:
    >>> from repolens import is_summarizable
    >>> is_summarizable("Makefile")
    True
    >>> is_summarizable("photo.png")
    False

Wiring the cache, the clients and the generator from ``REPOLENS_*``
environment variables::

    from repolens.services import build_services
    from repolens.settings import RepoLensSettings

    services = build_services(RepoLensSettings())
    record = await services.generator.summarize_file(
        source, "main.py", services.credentials,
        owner="octo", repo="demo", path="src/main.py",
    )
"""

__version__ = "0.1.0"

from repolens.cache.summary_cache import SummaryCacheStore  # noqa: E402
from repolens.diff.tree_diff import detect_changes  # noqa: E402
from repolens.exceptions import RepoLensError  # noqa: E402
from repolens.models.model_repo_node import ModelRepoNode  # noqa: E402
from repolens.models.model_summary_record import ModelSummaryRecord  # noqa: E402
from repolens.reconcile.engine import BatchReconciler  # noqa: E402
from repolens.summaries.generator import SummaryGenerator  # noqa: E402
from repolens.summaries.summarizability import is_summarizable  # noqa: E402

__all__ = [
    "BatchReconciler",
    "ModelRepoNode",
    "ModelSummaryRecord",
    "RepoLensError",
    "SummaryCacheStore",
    "SummaryGenerator",
    "__version__",
    "detect_changes",
    "is_summarizable",
]
