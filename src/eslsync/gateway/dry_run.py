"""Dry-run gateway that reads live state but records writes instead of sending them."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType

from eslsync.contracts.article import Article, ArticleFormat, ArticleInfo, PulledArticles
from eslsync.contracts.gateway import Gateway


@dataclass(frozen=True)
class DryRunOperation:
    """Deterministic dry-run operation log entry."""

    sequence: int
    name: str
    store_id: str
    article_ids: tuple[str, ...] = field(default_factory=tuple)


class DryRunGateway(Gateway):
    """Pass reads through to *inner*; record pushes and deletes without sending them.

    Article info reads are overlaid with the recorded writes, so a dry-run
    pass does not report its own unsent pushes as missing upstream.
    """

    def __init__(self, inner: Gateway) -> None:
        self._inner = inner
        self._operation_counter = 0
        self._operations: list[DryRunOperation] = []
        self._pushed: dict[str, set[str]] = {}
        self._deleted: dict[str, set[str]] = {}

    @property
    def operations(self) -> tuple[DryRunOperation, ...]:
        return tuple(self._operations)

    def _record_operation(self, name: str, store_id: str, article_ids: list[str]) -> None:
        self._operation_counter += 1
        self._operations.append(
            DryRunOperation(
                sequence=self._operation_counter,
                name=name,
                store_id=store_id,
                article_ids=tuple(article_ids),
            )
        )

    async def __aenter__(self) -> DryRunGateway:
        await self._inner.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._inner.__aexit__(exc_type, exc_val, exc_tb)

    async def fetch_article_format(self, store_id: str) -> ArticleFormat:
        return await self._inner.fetch_article_format(store_id)

    async def pull_articles(self, store_id: str) -> PulledArticles:
        return await self._inner.pull_articles(store_id)

    async def push_articles(self, store_id: str, articles: list[Article]) -> None:
        article_ids = [article.article_id for article in articles]
        self._record_operation("push_articles", store_id, article_ids)
        self._pushed.setdefault(store_id, set()).update(article_ids)
        self._deleted.get(store_id, set()).difference_update(article_ids)

    async def delete_articles(self, store_id: str, article_ids: list[str]) -> None:
        self._record_operation("delete_articles", store_id, list(article_ids))
        self._deleted.setdefault(store_id, set()).update(article_ids)
        self._pushed.get(store_id, set()).difference_update(article_ids)

    async def pull_article_info(self, store_id: str) -> list[ArticleInfo]:
        live = await self._inner.pull_article_info(store_id)
        deleted = self._deleted.get(store_id, set())
        infos = [info for info in live if info.article_id not in deleted]
        seen = {info.article_id for info in infos}
        for article_id in sorted(self._pushed.get(store_id, set()) - seen):
            infos.append(ArticleInfo(article_id=article_id))
        return infos
