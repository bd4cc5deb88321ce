"""Database persistence for the reconciliation engine."""

from eslsync.persistence.database import create_engine, create_session_factory, init_database
from eslsync.persistence.repository import SqlReconcileRepository

__all__ = ["SqlReconcileRepository", "create_engine", "create_session_factory", "init_database"]
