"""Batch reconciliation of the summary cache with repository changes."""

from repolens.reconcile.engine import BatchReconciler
from repolens.reconcile.pending_updates import ModelPendingUpdatesSnapshot, PendingUpdates

__all__ = ["BatchReconciler", "ModelPendingUpdatesSnapshot", "PendingUpdates"]
