"""AIMS label-management gateway."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx
from cachetools import TTLCache

from eslsync.contracts.article import Article, ArticleFormat, ArticleInfo, PulledArticles
from eslsync.contracts.config import GatewayConfig
from eslsync.contracts.domain import CompanyConnection
from eslsync.contracts.exceptions import (
    ArticlePullTruncatedError,
    AuthenticationError,
    EslSyncError,
    GatewayError,
    SchemaUnavailableError,
)
from eslsync.contracts.gateway import Gateway
from eslsync.contracts.repository import ReconcileRepository
from eslsync.gateway._retrying_transport import RetryingTransport
from eslsync.gateway.parsing import (
    extract_article_list,
    parse_article,
    parse_article_format,
    parse_article_info,
    parse_token_payload,
    serialize_article,
)

_LOG = logging.getLogger(__name__)

_TOKEN_PATH = "/common/api/v2/token"
_ARTICLE_INFO_PATH = "/common/api/v2/common/config/article/info"
_ARTICLES_PATH = "/common/api/v2/common/articles"
_FORMAT_PATH = "/common/api/v2/common/articles/upload/format"
_AUTH_REJECTED = frozenset({401, 403})
_FORMAT_CACHE_SIZE = 1024


@dataclass(frozen=True)
class _CachedToken:
    access_token: str
    expires_at: float


class AimsGateway(Gateway):
    """Credentialed HTTP client for the AIMS article API.

    Credentials are resolved per store from the repository and the stored
    password is decrypted with *decrypt_password*. Tokens are cached per
    company and refreshed once on a 401/403.
    """

    def __init__(
        self,
        *,
        repository: ReconcileRepository,
        decrypt_password: Callable[[str], str],
        config: GatewayConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._repository = repository
        self._decrypt_password = decrypt_password
        self._config = config or GatewayConfig()
        self._inner_transport = transport
        self._clock = clock

        self._clients: dict[str, httpx.AsyncClient] = {}
        self._tokens: dict[str, _CachedToken] = {}
        self._login_locks: dict[str, asyncio.Lock] = {}
        self._formats: TTLCache[str, ArticleFormat] = TTLCache(
            maxsize=_FORMAT_CACHE_SIZE, ttl=self._config.format_ttl_seconds, timer=clock
        )

    async def __aenter__(self) -> AimsGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()

    # ------------------------------------------------------------------
    # Gateway contract
    # ------------------------------------------------------------------

    async def fetch_article_format(self, store_id: str) -> ArticleFormat:
        try:
            connection = await self._connection(store_id)
        except GatewayError as exc:
            raise SchemaUnavailableError(f"Article format unavailable for store {store_id}: {exc}") from exc
        company_id = connection.company_id

        cached = self._formats.get(company_id)
        if cached is not None:
            return cached

        try:
            settings = await self._repository.get_company_settings(company_id)
        except EslSyncError as exc:
            _LOG.error(
                "Failed reading stored article format",
                extra={"company_id": company_id, "error": str(exc)},
            )
        else:
            if settings.solum_article_format is not None:
                self._formats[company_id] = settings.solum_article_format
                return settings.solum_article_format

        try:
            response = await self._request(
                connection,
                "GET",
                _FORMAT_PATH,
                operation="fetch article format",
                params={"company": connection.company_code},
            )
            article_format = parse_article_format(response.json())
        except (GatewayError, ValueError) as exc:
            raise SchemaUnavailableError(f"Article format unavailable for store {store_id}: {exc}") from exc

        self._formats[company_id] = article_format
        _LOG.info(
            "Cached article format",
            extra={"company_id": company_id, "data_fields": len(article_format.article_data)},
        )
        try:
            await self._repository.save_article_format(company_id, article_format)
        except EslSyncError as exc:
            _LOG.error("Failed saving article format", extra={"company_id": company_id, "error": str(exc)})
        return article_format

    async def pull_articles(self, store_id: str) -> PulledArticles:
        connection = await self._connection(store_id)
        records, truncated = await self._pull_records(connection, operation="pull articles")
        articles = [article for article in map(parse_article, records) if article is not None]
        if truncated:
            message = (
                f"Article listing for store {store_id} reached the {self._config.max_pages}-page cap "
                f"after {len(articles)} articles"
            )
            if self._config.fail_on_truncation:
                raise ArticlePullTruncatedError(message, pages=self._config.max_pages, fetched=len(articles))
            _LOG.warning(message, extra={"store_id": store_id, "fetched": len(articles)})
        return PulledArticles(articles=articles, truncated=truncated)

    async def push_articles(self, store_id: str, articles: list[Article]) -> None:
        if not articles:
            return
        connection = await self._connection(store_id)
        batch_size = self._config.batch_size
        batches = [articles[i : i + batch_size] for i in range(0, len(articles), batch_size)]
        if len(batches) > 1:
            _LOG.info(
                "Pushing articles in batches",
                extra={"store_id": store_id, "articles": len(articles), "batches": len(batches)},
            )
        for batch in batches:
            await self._request(
                connection,
                "POST",
                _ARTICLES_PATH,
                operation="push articles",
                params=self._store_params(connection),
                json=[serialize_article(article) for article in batch],
            )

    async def delete_articles(self, store_id: str, article_ids: list[str]) -> None:
        if not article_ids:
            return
        connection = await self._connection(store_id)
        await self._request(
            connection,
            "DELETE",
            _ARTICLES_PATH,
            operation="delete articles",
            params=self._store_params(connection),
            json={"articleDeleteList": list(article_ids)},
        )

    async def pull_article_info(self, store_id: str) -> list[ArticleInfo]:
        connection = await self._connection(store_id)
        records, truncated = await self._pull_records(connection, operation="pull article info")
        if truncated:
            _LOG.warning(
                "Article info listing reached the page cap",
                extra={"store_id": store_id, "fetched": len(records)},
            )
        return [info for info in map(parse_article_info, records) if info is not None]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def invalidate_token(self, company_id: str) -> None:
        self._tokens.pop(company_id, None)

    def invalidate_format(self, company_id: str) -> None:
        self._formats.pop(company_id, None)

    async def _connection(self, store_id: str) -> CompanyConnection:
        connection = await self._repository.get_company_connection(store_id)
        if connection is None:
            raise AuthenticationError(f"No AIMS configuration for store {store_id}")
        return connection

    async def _pull_records(
        self, connection: CompanyConnection, *, operation: str
    ) -> tuple[list[dict[str, Any]], bool]:
        page_size = self._config.page_size
        records: list[dict[str, Any]] = []
        for page in range(self._config.max_pages):
            response = await self._request(
                connection,
                "GET",
                _ARTICLE_INFO_PATH,
                operation=operation,
                params={**self._store_params(connection), "page": page, "size": page_size},
            )
            page_records = self._page_records(response)
            if not page_records:
                return records, False
            records.extend(page_records)
            if len(page_records) < page_size:
                return records, False
        return records, True

    @staticmethod
    def _page_records(response: httpx.Response) -> list[dict[str, Any]]:
        if response.status_code == 204 or not response.content:
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayError(f"Article listing is not valid JSON: {exc}") from exc
        return extract_article_list(payload)

    @staticmethod
    def _store_params(connection: CompanyConnection) -> dict[str, str]:
        return {"company": connection.company_code, "store": connection.store_code}

    @staticmethod
    def _url(connection: CompanyConnection, path: str) -> str:
        prefix = "/c1" if connection.cluster == "c1" else ""
        return f"{connection.base_url.rstrip('/')}{prefix}{path}"

    def _client_for(self, base_url: str) -> httpx.AsyncClient:
        client = self._clients.get(base_url)
        if client is None:
            client = httpx.AsyncClient(
                transport=RetryingTransport(transport=self._inner_transport, max_retries=self._config.max_retries),
                timeout=httpx.Timeout(self._config.timeout_seconds),
                headers={"Content-Type": "application/json"},
            )
            self._clients[base_url] = client
        return client

    async def _request(
        self,
        connection: CompanyConnection,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        client = self._client_for(connection.base_url)
        url = self._url(connection, path)
        response = await self._send(client, connection, method, url, operation=operation, params=params, json=json)
        if response.status_code in _AUTH_REJECTED:
            _LOG.info("AIMS rejected cached token, logging in again", extra={"company_id": connection.company_id})
            self.invalidate_token(connection.company_id)
            response = await self._send(
                client, connection, method, url, operation=operation, params=params, json=json
            )

        if response.status_code in _AUTH_REJECTED:
            raise AuthenticationError(f"{operation} failed: HTTP {response.status_code}")
        if response.is_error:
            raise GatewayError(f"{operation} failed: HTTP {response.status_code} {response.text[:200]}")
        return response

    async def _send(
        self,
        client: httpx.AsyncClient,
        connection: CompanyConnection,
        method: str,
        url: str,
        *,
        operation: str,
        params: dict[str, Any] | None,
        json: Any,
    ) -> httpx.Response:
        token = await self._token(connection)
        try:
            return await client.request(
                method, url, params=params, json=json, headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as exc:
            raise GatewayError(f"{operation} failed: {exc}") from exc

    async def _token(self, connection: CompanyConnection) -> str:
        company_id = connection.company_id
        cached = self._usable_token(company_id)
        if cached is not None:
            return cached

        lock = self._login_locks.setdefault(company_id, asyncio.Lock())
        async with lock:
            # Concurrent callers wait here and reuse the token the first one obtained.
            cached = self._usable_token(company_id)
            if cached is not None:
                return cached
            token = await self._login(connection)
            self._tokens[company_id] = token
            return token.access_token

    def _usable_token(self, company_id: str) -> str | None:
        cached = self._tokens.get(company_id)
        if cached is None:
            return None
        if cached.expires_at <= self._clock() + self._config.token_expiry_buffer_seconds:
            return None
        return cached.access_token

    async def _login(self, connection: CompanyConnection) -> _CachedToken:
        try:
            password = self._decrypt_password(connection.password_enc)
        except EslSyncError as exc:
            raise AuthenticationError(f"Cannot decrypt AIMS password for company {connection.company_id}") from exc

        client = self._client_for(connection.base_url)
        try:
            response = await client.post(
                self._url(connection, _TOKEN_PATH),
                json={"username": connection.username, "password": password},
            )
        except httpx.HTTPError as exc:
            raise GatewayError(f"AIMS login failed: {exc}") from exc
        if response.is_error:
            raise AuthenticationError(f"AIMS login failed: HTTP {response.status_code}")
        try:
            access_token, expires_in = parse_token_payload(response.json())
        except (GatewayError, ValueError) as exc:
            raise AuthenticationError(f"AIMS login returned an invalid response: {exc}") from exc
        _LOG.debug("Logged in to AIMS", extra={"company_id": connection.company_id})
        return _CachedToken(access_token=access_token, expires_at=self._clock() + expires_in)
