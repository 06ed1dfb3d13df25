# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Batch reconciliation enums.

Contains the per-run state machine and the per-item outcome taxonomy.
"""

from __future__ import annotations

from enum import Enum


class EnumBatchState(str, Enum):
    """Lifecycle of one reconciliation run.

    IDLE -> RUNNING -> {COMPLETED, ABORTED, CANCELLED}. There is no paused
    state; cancellation is cooperative and only observed between items.
    """

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


class EnumItemOutcome(str, Enum):
    """What happened to one selected node during a run."""

    SUMMARIZED = "summarized"
    """A summary was produced (freshly generated or served by the generator's cache lookup)."""

    CACHED = "cached"
    """A summary already existed and no refresh was requested; nothing was called."""

    SKIPPED = "skipped"
    """Not eligible: unsummarizable file, or directory with no summarized children."""

    FAILED = "failed"
    """Content fetch or generation failed for this item."""


__all__ = ["EnumBatchState", "EnumItemOutcome"]
