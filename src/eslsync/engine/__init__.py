"""Reconciliation engine."""

from eslsync.engine.engine import ReconcileEngine
from eslsync.engine.job import ReconcileJob
from eslsync.engine.progress import NullReconcileProgress, ReconcileProgress

__all__ = ["NullReconcileProgress", "ReconcileEngine", "ReconcileJob", "ReconcileProgress"]
