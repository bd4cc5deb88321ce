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


def test_exception_hierarchy() -> None:
    assert issubclass(ConfigError, EslSyncError)
    assert issubclass(ArticleBuildError, EslSyncError)
    assert issubclass(GatewayError, EslSyncError)
    assert issubclass(AuthenticationError, GatewayError)
    assert issubclass(SchemaUnavailableError, GatewayError)
    assert issubclass(ArticlePullTruncatedError, GatewayError)
    assert issubclass(RepositoryError, EslSyncError)
    assert issubclass(StoreNotFoundError, RepositoryError)
    assert issubclass(ReconcileError, EslSyncError)


def test_schema_unavailable_error_exposes_code() -> None:
    assert SchemaUnavailableError("no format").code == "SCHEMA_UNAVAILABLE"


def test_truncated_error_fields() -> None:
    err = ArticlePullTruncatedError("cap reached", pages=50, fetched=5000)

    assert str(err) == "cap reached"
    assert err.pages == 50
    assert err.fetched == 5000


def test_store_not_found_error_fields() -> None:
    err = StoreNotFoundError("s-404")

    assert err.store_id == "s-404"
    assert "s-404" in str(err)
