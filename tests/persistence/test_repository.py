from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eslsync.contracts.article import ArticleFormat, MappingInfo
from eslsync.contracts.exceptions import RepositoryError, StoreNotFoundError
from eslsync.persistence import SqlReconcileRepository, create_engine, create_session_factory, init_database
from eslsync.persistence.database import to_async_url
from eslsync.persistence.models import Company, ConferenceRoom, Person, Space, Store


def _company(company_id: str, **overrides: object) -> Company:
    values: dict[str, object] = {
        "id": company_id,
        "name": company_id.upper(),
        "aims_company_code": f"CODE-{company_id}",
        "aims_base_url": "https://aims.example.com",
        "aims_cluster": None,
        "aims_username": "sync@example.com",
        "aims_password_enc": "encrypted",
        "settings": {},
        "is_active": True,
    }
    values.update(overrides)
    return Company(**values)


def _store(store_id: str, company_id: str, **overrides: object) -> Store:
    values: dict[str, object] = {
        "id": store_id,
        "company_id": company_id,
        "name": f"Store {store_id}",
        "store_number": store_id.upper(),
        "settings": {},
        "sync_enabled": True,
        "is_active": True,
    }
    values.update(overrides)
    return Store(**values)


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'eslsync.db'}")
    await init_database(engine)
    factory = create_session_factory(engine)
    async with factory() as session:
        session.add_all(
            [
                _company("co-1", settings={"peopleManagerEnabled": True, "keep": "me"}),
                _company("co-off", is_active=False),
                _company("co-nocreds", aims_password_enc=None),
            ]
        )
        await session.flush()
        session.add_all(
            [
                _store("s-b", "co-1", name="Bravo"),
                _store("s-a", "co-1", name="Alpha", settings={"peopleManagerEnabled": True}),
                _store("s-disabled", "co-1", sync_enabled=False),
                _store("s-inactive", "co-1", is_active=False),
                _store("s-company-off", "co-off"),
                _store("s-nocreds", "co-nocreds"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                Space(id="sp-2", store_id="s-a", external_id="S2", data={"ITEM_NAME": "Two"}, assigned_labels=[]),
                Space(id="sp-1", store_id="s-a", external_id="S1", data={}, assigned_labels=["L1"]),
                Space(id="sp-x", store_id="s-b", external_id="S9", data={}, assigned_labels=[]),
                Person(id="p-1", store_id="s-a", assigned_space_id="2", data={"name": "Dana"}),
                Person(id="p-2", store_id="s-a", assigned_space_id=None, data={"name": "Idle"}),
                ConferenceRoom(
                    id="r-1",
                    store_id="s-a",
                    external_id="1",
                    room_name="Board",
                    has_meeting=True,
                    meeting_name="Standup",
                    start_time="09:00",
                    end_time="09:15",
                    participants=["Ann", "Bo"],
                    data={},
                    assigned_labels=[],
                ),
            ]
        )
        await session.commit()
    yield factory
    await engine.dispose()


@pytest.mark.asyncio
async def test_list_sync_stores_filters_ineligible_stores(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    repository = SqlReconcileRepository(session_factory)

    stores = await repository.list_sync_stores()

    assert [store.id for store in stores] == ["s-a", "s-b"]
    assert stores[0].code == "S-A"
    assert stores[0].display_name == "Alpha"
    assert stores[0].settings == {"peopleManagerEnabled": True}


@pytest.mark.asyncio
async def test_get_store(session_factory: async_sessionmaker[AsyncSession]) -> None:
    repository = SqlReconcileRepository(session_factory)

    store = await repository.get_store("s-disabled")

    assert store.sync_enabled is False
    with pytest.raises(StoreNotFoundError):
        await repository.get_store("missing")


@pytest.mark.asyncio
async def test_get_company_settings(session_factory: async_sessionmaker[AsyncSession]) -> None:
    repository = SqlReconcileRepository(session_factory)

    settings = await repository.get_company_settings("co-1")

    assert settings.people_manager_enabled is True
    with pytest.raises(RepositoryError, match="Company not found"):
        await repository.get_company_settings("missing")


@pytest.mark.asyncio
async def test_get_company_connection(session_factory: async_sessionmaker[AsyncSession]) -> None:
    repository = SqlReconcileRepository(session_factory)

    connection = await repository.get_company_connection("s-a")

    assert connection is not None
    assert connection.company_id == "co-1"
    assert connection.company_code == "CODE-co-1"
    assert connection.store_code == "S-A"
    assert connection.password_enc == "encrypted"
    assert await repository.get_company_connection("s-nocreds") is None
    assert await repository.get_company_connection("missing") is None


@pytest.mark.asyncio
async def test_save_article_format_merges_into_settings(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    repository = SqlReconcileRepository(session_factory)
    article_format = ArticleFormat(mapping_info=MappingInfo(article_id="ARTICLE_ID"), article_data=["ARTICLE_ID"])

    await repository.save_article_format("co-1", article_format)
    settings = await repository.get_company_settings("co-1")

    assert settings.people_manager_enabled is True
    assert settings.solum_article_format == article_format
    async with session_factory() as session:
        company = await session.get(Company, "co-1")
        assert company is not None
        assert company.settings["keep"] == "me"
        assert company.settings["solumArticleFormat"]["mappingInfo"]["articleId"] == "ARTICLE_ID"


@pytest.mark.asyncio
async def test_save_article_format_for_unknown_company(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    repository = SqlReconcileRepository(session_factory)

    with pytest.raises(RepositoryError):
        await repository.save_article_format("missing", ArticleFormat())


@pytest.mark.asyncio
async def test_listings_are_scoped_to_store(session_factory: async_sessionmaker[AsyncSession]) -> None:
    repository = SqlReconcileRepository(session_factory)

    spaces = await repository.list_spaces("s-a")
    people = await repository.list_assigned_people("s-a")
    rooms = await repository.list_conference_rooms("s-a")

    assert [space.external_id for space in spaces] == ["S1", "S2"]
    assert spaces[0].assigned_labels == ["L1"]
    assert spaces[1].data == {"ITEM_NAME": "Two"}
    assert [person.id for person in people] == ["p-1"]
    assert people[0].data == {"name": "Dana"}
    assert len(rooms) == 1
    assert rooms[0].participants == ["Ann", "Bo"]
    assert rooms[0].has_meeting is True
    assert await repository.list_spaces("s-disabled") == []


@pytest.mark.asyncio
async def test_label_write_back(session_factory: async_sessionmaker[AsyncSession]) -> None:
    repository = SqlReconcileRepository(session_factory)

    await repository.update_space_labels("s-a", "S2", ["L7", "L8"])
    await repository.update_space_labels("s-a", "S1", [])
    await repository.update_conference_room_labels("s-a", "1", ["L9"])

    spaces = {space.external_id: space for space in await repository.list_spaces("s-a")}
    rooms = await repository.list_conference_rooms("s-a")
    assert spaces["S2"].assigned_labels == ["L7", "L8"]
    assert spaces["S1"].assigned_labels == []
    assert rooms[0].assigned_labels == ["L9"]


@pytest.mark.asyncio
async def test_touch_store_sync(session_factory: async_sessionmaker[AsyncSession]) -> None:
    repository = SqlReconcileRepository(session_factory)
    at = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)

    await repository.touch_store_sync("s-a", at)
    store = await repository.get_store("s-a")

    assert store.last_aims_sync_at is not None
    assert store.last_aims_sync_at.replace(tzinfo=UTC) == at


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("postgres://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("postgresql+asyncpg://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("sqlite+aiosqlite:///x.db", "sqlite+aiosqlite:///x.db"),
    ],
)
def test_to_async_url(url: str, expected: str) -> None:
    assert to_async_url(url) == expected
