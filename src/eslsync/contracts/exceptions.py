"""Exception hierarchy for eslsync."""

from __future__ import annotations


class EslSyncError(Exception):
    """Base exception for all eslsync errors."""


class ConfigError(EslSyncError):
    """Configuration or tenant settings loading/validation failure."""


class ArticleBuildError(EslSyncError):
    """Structurally invalid input handed to an article builder."""


class GatewayError(EslSyncError):
    """Base label-management gateway failure."""


class AuthenticationError(GatewayError):
    """Credentials missing, undecryptable, or rejected by the gateway."""


class SchemaUnavailableError(GatewayError):
    """Article format could not be obtained for a store."""

    code = "SCHEMA_UNAVAILABLE"


class ArticlePullTruncatedError(GatewayError):
    """Article listing hit the pagination safety cap."""

    def __init__(self, message: str, *, pages: int, fetched: int) -> None:
        super().__init__(message)
        self.pages = pages
        self.fetched = fetched


class RepositoryError(EslSyncError):
    """Database access failure."""


class StoreNotFoundError(RepositoryError):
    """Requested store does not exist."""

    def __init__(self, store_id: str) -> None:
        super().__init__(f"Store not found: {store_id}")
        self.store_id = store_id


class ReconcileError(EslSyncError):
    """Engine-level reconciliation failure."""
