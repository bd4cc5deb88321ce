"""Label-management gateway contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from eslsync.contracts.article import Article, ArticleFormat, ArticleInfo, PulledArticles


class Gateway(ABC):
    @abstractmethod
    async def __aenter__(self) -> Gateway: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def fetch_article_format(self, store_id: str) -> ArticleFormat: ...  # pragma: no cover

    @abstractmethod
    async def pull_articles(self, store_id: str) -> PulledArticles: ...  # pragma: no cover

    @abstractmethod
    async def push_articles(self, store_id: str, articles: list[Article]) -> None: ...  # pragma: no cover

    @abstractmethod
    async def delete_articles(self, store_id: str, article_ids: list[str]) -> None: ...  # pragma: no cover

    @abstractmethod
    async def pull_article_info(self, store_id: str) -> list[ArticleInfo]: ...  # pragma: no cover
