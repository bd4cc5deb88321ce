"""SQLAlchemy implementation of the reconciliation repository."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eslsync.contracts.article import ArticleFormat
from eslsync.contracts.domain import (
    CompanyConnection,
    ConferenceRoomRecord,
    PersonRecord,
    SpaceRecord,
    StoreRecord,
)
from eslsync.contracts.exceptions import RepositoryError, StoreNotFoundError
from eslsync.contracts.repository import ReconcileRepository
from eslsync.contracts.settings import CompanySettings, parse_company_settings
from eslsync.persistence.models import Company, ConferenceRoom, Person, Space, Store

logger = logging.getLogger(__name__)


def _store_to_record(store: Store) -> StoreRecord:
    return StoreRecord(
        id=store.id,
        code=store.store_number,
        name=store.name or "",
        company_id=store.company_id,
        settings=store.settings,
        sync_enabled=store.sync_enabled,
        is_active=store.is_active,
        last_aims_sync_at=store.last_aims_sync_at,
    )


def _has_credentials(company: Company) -> bool:
    return bool(company.aims_base_url and company.aims_username and company.aims_password_enc)


class SqlReconcileRepository(ReconcileRepository):
    """Reads domain state and writes back label bindings and sync timestamps."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise RepositoryError(f"{operation} failed: {exc}") from exc

    async def list_sync_stores(self) -> list[StoreRecord]:
        stmt = (
            select(Store)
            .join(Company, Company.id == Store.company_id)
            .where(
                Store.sync_enabled.is_(True),
                Store.is_active.is_(True),
                Company.is_active.is_(True),
                Company.aims_base_url.is_not(None),
                Company.aims_username.is_not(None),
                Company.aims_password_enc.is_not(None),
            )
            .order_by(Store.name, Store.id)
        )
        async with self._session("list sync stores") as session:
            stores = (await session.execute(stmt)).scalars().all()
        return [_store_to_record(store) for store in stores]

    async def get_store(self, store_id: str) -> StoreRecord:
        async with self._session("get store") as session:
            store = await session.get(Store, store_id)
        if store is None:
            raise StoreNotFoundError(store_id)
        return _store_to_record(store)

    async def get_company_settings(self, company_id: str) -> CompanySettings:
        async with self._session("get company settings") as session:
            company = await session.get(Company, company_id)
        if company is None:
            raise RepositoryError(f"Company not found: {company_id}")
        return parse_company_settings(company.settings)

    async def get_company_connection(self, store_id: str) -> CompanyConnection | None:
        stmt = select(Store, Company).join(Company, Company.id == Store.company_id).where(Store.id == store_id)
        async with self._session("get company connection") as session:
            row = (await session.execute(stmt)).first()
        if row is None:
            return None
        store, company = row
        if not _has_credentials(company):
            return None
        return CompanyConnection(
            company_id=company.id,
            company_code=company.aims_company_code,
            store_code=store.store_number,
            base_url=company.aims_base_url,
            cluster=company.aims_cluster,
            username=company.aims_username,
            password_enc=company.aims_password_enc,
        )

    async def save_article_format(self, company_id: str, article_format: ArticleFormat) -> None:
        async with self._session("save article format") as session:
            company = await session.get(Company, company_id)
            if company is None:
                raise RepositoryError(f"Company not found: {company_id}")
            settings = dict(company.settings or {})
            settings["solumArticleFormat"] = article_format.model_dump(mode="json", by_alias=True)
            company.settings = settings
            await session.commit()
        logger.info("Saved article format", extra={"company_id": company_id})

    async def list_conference_rooms(self, store_id: str) -> list[ConferenceRoomRecord]:
        stmt = select(ConferenceRoom).where(ConferenceRoom.store_id == store_id).order_by(ConferenceRoom.external_id)
        async with self._session("list conference rooms") as session:
            rooms = (await session.execute(stmt)).scalars().all()
        return [
            ConferenceRoomRecord(
                id=room.id,
                store_id=room.store_id,
                external_id=room.external_id,
                room_name=room.room_name or "",
                has_meeting=room.has_meeting,
                meeting_name=room.meeting_name,
                start_time=room.start_time,
                end_time=room.end_time,
                participants=list(room.participants or []),
                data=dict(room.data or {}),
                assigned_labels=list(room.assigned_labels or []),
            )
            for room in rooms
        ]

    async def list_assigned_people(self, store_id: str) -> list[PersonRecord]:
        stmt = (
            select(Person)
            .where(Person.store_id == store_id, Person.assigned_space_id.is_not(None))
            .order_by(Person.assigned_space_id)
        )
        async with self._session("list assigned people") as session:
            people = (await session.execute(stmt)).scalars().all()
        return [
            PersonRecord(
                id=person.id,
                store_id=person.store_id,
                assigned_space_id=person.assigned_space_id,
                data=dict(person.data or {}),
            )
            for person in people
        ]

    async def list_spaces(self, store_id: str) -> list[SpaceRecord]:
        stmt = select(Space).where(Space.store_id == store_id).order_by(Space.external_id)
        async with self._session("list spaces") as session:
            spaces = (await session.execute(stmt)).scalars().all()
        return [
            SpaceRecord(
                id=space.id,
                store_id=space.store_id,
                external_id=space.external_id,
                data=dict(space.data or {}),
                assigned_labels=list(space.assigned_labels or []),
            )
            for space in spaces
        ]

    async def update_space_labels(self, store_id: str, external_id: str, labels: list[str]) -> None:
        stmt = (
            update(Space)
            .where(Space.store_id == store_id, Space.external_id == external_id)
            .values(assigned_labels=list(labels))
        )
        async with self._session("update space labels") as session:
            await session.execute(stmt)
            await session.commit()

    async def update_conference_room_labels(self, store_id: str, external_id: str, labels: list[str]) -> None:
        stmt = (
            update(ConferenceRoom)
            .where(ConferenceRoom.store_id == store_id, ConferenceRoom.external_id == external_id)
            .values(assigned_labels=list(labels))
        )
        async with self._session("update conference room labels") as session:
            await session.execute(stmt)
            await session.commit()

    async def touch_store_sync(self, store_id: str, at: datetime) -> None:
        stmt = update(Store).where(Store.id == store_id).values(last_aims_sync_at=at)
        async with self._session("touch store sync") as session:
            await session.execute(stmt)
            await session.commit()
