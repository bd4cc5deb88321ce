"""Database boundary consumed by the reconciliation engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from eslsync.contracts.article import ArticleFormat
from eslsync.contracts.domain import (
    CompanyConnection,
    ConferenceRoomRecord,
    PersonRecord,
    SpaceRecord,
    StoreRecord,
)
from eslsync.contracts.settings import CompanySettings


class ReconcileRepository(ABC):
    @abstractmethod
    async def list_sync_stores(self) -> list[StoreRecord]:
        """Stores with sync enabled, active, and owned by an active, fully-credentialed company."""

    @abstractmethod
    async def get_store(self, store_id: str) -> StoreRecord:
        """Return one store or raise ``StoreNotFoundError``."""

    @abstractmethod
    async def get_company_settings(self, company_id: str) -> CompanySettings: ...  # pragma: no cover

    @abstractmethod
    async def get_company_connection(self, store_id: str) -> CompanyConnection | None:
        """Upstream credentials for a store, or ``None`` when incomplete."""

    @abstractmethod
    async def save_article_format(self, company_id: str, article_format: ArticleFormat) -> None: ...  # pragma: no cover

    @abstractmethod
    async def list_conference_rooms(self, store_id: str) -> list[ConferenceRoomRecord]: ...  # pragma: no cover

    @abstractmethod
    async def list_assigned_people(self, store_id: str) -> list[PersonRecord]: ...  # pragma: no cover

    @abstractmethod
    async def list_spaces(self, store_id: str) -> list[SpaceRecord]: ...  # pragma: no cover

    @abstractmethod
    async def update_space_labels(self, store_id: str, external_id: str, labels: list[str]) -> None: ...  # pragma: no cover

    @abstractmethod
    async def update_conference_room_labels(
        self, store_id: str, external_id: str, labels: list[str]
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def touch_store_sync(self, store_id: str, at: datetime) -> None: ...  # pragma: no cover
