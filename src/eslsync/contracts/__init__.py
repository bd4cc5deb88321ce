"""Public contracts for eslsync."""

from eslsync.contracts.article import (
    CONFERENCE_ARTICLE_PREFIX,
    Article,
    ArticleFormat,
    ArticleInfo,
    MappingInfo,
    PulledArticles,
)
from eslsync.contracts.config import EslSyncConfig, GatewayConfig
from eslsync.contracts.domain import (
    CompanyConnection,
    ConferenceRoomRecord,
    PersonRecord,
    SpaceRecord,
    StoreRecord,
)
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
from eslsync.contracts.settings import (
    SETTINGS_SCHEMA_VERSION,
    CompanySettings,
    ConferenceMapping,
    PeopleManagerConfig,
    SolumMappingConfig,
    StoreSettings,
    parse_company_settings,
    parse_store_settings,
)

__all__ = [
    "CONFERENCE_ARTICLE_PREFIX",
    "SETTINGS_SCHEMA_VERSION",
    "Article",
    "ArticleBuildError",
    "ArticleFormat",
    "ArticleInfo",
    "ArticlePullTruncatedError",
    "AuthenticationError",
    "CompanyConnection",
    "CompanySettings",
    "ConferenceMapping",
    "ConferenceRoomRecord",
    "ConfigError",
    "EslSyncConfig",
    "EslSyncError",
    "Gateway",
    "GatewayConfig",
    "GatewayError",
    "MappingInfo",
    "PeopleManagerConfig",
    "PersonRecord",
    "PulledArticles",
    "ReconcileError",
    "ReconcileRepository",
    "ReconcileStoreResult",
    "RepositoryError",
    "SchemaUnavailableError",
    "SolumMappingConfig",
    "SpaceRecord",
    "StoreNotFoundError",
    "StoreRecord",
    "StoreSettings",
    "SyncMode",
    "parse_company_settings",
    "parse_store_settings",
]
