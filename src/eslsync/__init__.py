"""Public API surface for eslsync."""

__version__ = "1.0.0"

from eslsync.articles import (
    article_needs_update,
    build_conference_article,
    build_empty_slot_article,
    build_person_article,
    build_space_article,
)
from eslsync.contracts.article import Article, ArticleFormat, ArticleInfo, MappingInfo, PulledArticles
from eslsync.contracts.config import EslSyncConfig, GatewayConfig
from eslsync.contracts.exceptions import (
    ArticleBuildError,
    ArticlePullTruncatedError,
    AuthenticationError,
    ConfigError,
    EslSyncError,
    GatewayError,
    ReconcileError,
    RepositoryError,
    SchemaUnavailableError,
    StoreNotFoundError,
)
from eslsync.contracts.gateway import Gateway
from eslsync.contracts.repository import ReconcileRepository
from eslsync.contracts.result import ReconcileStoreResult, SyncMode
from eslsync.engine import ReconcileEngine, ReconcileJob, ReconcileProgress
from eslsync.sdk import EslSync, load_config

__all__ = [
    "Article",
    "ArticleBuildError",
    "ArticleFormat",
    "ArticleInfo",
    "ArticlePullTruncatedError",
    "AuthenticationError",
    "ConfigError",
    "EslSync",
    "EslSyncConfig",
    "EslSyncError",
    "Gateway",
    "GatewayConfig",
    "GatewayError",
    "MappingInfo",
    "PulledArticles",
    "ReconcileEngine",
    "ReconcileError",
    "ReconcileJob",
    "ReconcileProgress",
    "ReconcileRepository",
    "ReconcileStoreResult",
    "RepositoryError",
    "SchemaUnavailableError",
    "StoreNotFoundError",
    "SyncMode",
    "__version__",
    "article_needs_update",
    "build_conference_article",
    "build_empty_slot_article",
    "build_person_article",
    "build_space_article",
    "load_config",
]
