from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from eslsync import AuthenticationError, ConfigError, EslSync, EslSyncConfig, load_config
from eslsync.auth import PasswordCipher
from eslsync.gateway import AimsGateway, DryRunGateway
from eslsync.persistence import create_engine, create_session_factory, init_database
from eslsync.persistence.models import Company, Space, Store
from eslsync.sdk import _resolve_database_url
from tests.fakes.gateway import FakeGateway
from tests.fakes.repository import FakeRepository

_SECRET = "deployment-secret"
_FORMAT = {
    "mappingInfo": {"store": "STORE_ID", "articleId": "ARTICLE_ID", "articleName": "ITEM_NAME"},
    "articleData": ["STORE_ID", "ARTICLE_ID", "ITEM_NAME"],
}

# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


def _write_config(tmp_path: Path, payload: Any) -> Path:
    path = tmp_path / "eslsync.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return path


def test_load_config_resolves_relative_sqlite_path(tmp_path: Path) -> None:
    path = _write_config(tmp_path, {"database_url": "sqlite+aiosqlite:///data/eslsync.db", "interval_seconds": 30})

    config = load_config(path)

    assert config.database_url == f"sqlite+aiosqlite:///{(tmp_path / 'data' / 'eslsync.db').resolve()}"
    assert config.interval_seconds == 30


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed reading config file"):
        load_config(tmp_path / "absent.json")


def test_load_config_invalid_json(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="invalid JSON"):
        load_config(_write_config(tmp_path, "{not json"))


def test_load_config_invalid_values(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="invalid config"):
        load_config(_write_config(tmp_path, {"database_url": "sqlite://", "max_concurrent_stores": 0}))


@pytest.mark.parametrize(
    "url",
    [
        "postgresql://user:pw@db:5432/app",
        "sqlite+aiosqlite:///:memory:",
        "sqlite+aiosqlite:////var/lib/eslsync.db",
        "sqlite://",
    ],
)
def test_resolve_database_url_passes_through(url: str) -> None:
    assert _resolve_database_url(url, base_dir=Path("/etc/eslsync")) == url


# ---------------------------------------------------------------------------
# EslSync with injected collaborators
# ---------------------------------------------------------------------------


def _config(**overrides: Any) -> EslSyncConfig:
    return EslSyncConfig(database_url="sqlite+aiosqlite:///:memory:", **overrides)


@pytest.mark.asyncio
async def test_initialize_database_requires_engine() -> None:
    sync = EslSync(config=_config(), gateway=FakeGateway(), repository=FakeRepository())

    with pytest.raises(ConfigError):
        await sync.initialize_database()


@pytest.mark.asyncio
async def test_reconcile_store_and_context_manager(article_format: Any) -> None:
    gateway = FakeGateway(article_format)
    repository = FakeRepository()
    repository.add_store("s1")

    async with EslSync(config=_config(), gateway=gateway, repository=repository) as sync:
        result = await sync.reconcile_store("s1")

    assert result.success is True
    assert gateway.entered and gateway.exited
    assert [store_id for store_id, _ in repository.touched] == ["s1"]


@pytest.mark.asyncio
async def test_create_job_uses_configured_intervals() -> None:
    sync = EslSync(
        config=_config(interval_seconds=7, initial_delay_seconds=0),
        gateway=FakeGateway(),
        repository=FakeRepository(),
    )

    job = sync.create_job()

    assert job._interval_seconds == 7
    assert job._initial_delay_seconds == 0


@pytest.mark.asyncio
async def test_run_returns_once_stopped() -> None:
    sync = EslSync(config=_config(initial_delay_seconds=0.01), gateway=FakeGateway(), repository=FakeRepository())
    stop_event = asyncio.Event()

    runner = asyncio.create_task(sync.run(stop_event))
    await asyncio.sleep(0.05)
    stop_event.set()
    await asyncio.wait_for(runner, timeout=1)

    assert runner.done()


# ---------------------------------------------------------------------------
# from_config against SQLite and a mocked AIMS
# ---------------------------------------------------------------------------


class _Aims:
    def __init__(self, articles: dict[str, dict[str, Any]]) -> None:
        self.articles = articles
        self.labels: dict[str, list[str]] = {}
        self.logins: list[dict[str, Any]] = []
        self.writes: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/token"):
            self.logins.append(json.loads(request.content))
            return httpx.Response(200, json={"responseMessage": {"access_token": "tok", "expires_in": 3600}})
        if path.endswith("/article/info"):
            if request.url.params["page"] != "0":
                return httpx.Response(200, json=[])
            records = [
                {**article, "assignedLabel": self.labels.get(article_id, [])}
                for article_id, article in self.articles.items()
            ]
            return httpx.Response(200, json=records)
        if path.endswith("/articles") and request.method == "POST":
            self.writes.append("POST")
            for article in json.loads(request.content):
                self.articles[article["articleId"]] = article
            return httpx.Response(200, json={"responseCode": "200"})
        if path.endswith("/articles") and request.method == "DELETE":
            self.writes.append("DELETE")
            for article_id in json.loads(request.content)["articleDeleteList"]:
                self.articles.pop(article_id, None)
            return httpx.Response(200, json={"responseCode": "200"})
        return httpx.Response(404)


async def _seed_database(database_url: str) -> None:
    engine = create_engine(database_url)
    await init_database(engine)
    factory = create_session_factory(engine)
    async with factory() as session:
        session.add(
            Company(
                id="co-1",
                name="ACME",
                aims_company_code="ACME",
                aims_base_url="https://aims.example.com",
                aims_username="sync@acme",
                aims_password_enc=PasswordCipher(_SECRET).encrypt("aims-password"),
                settings={"solumArticleFormat": _FORMAT},
                is_active=True,
            )
        )
        await session.flush()
        session.add(Store(id="s1", company_id="co-1", name="HQ", store_number="01", settings={}))
        await session.flush()
        session.add(Space(id="sp-1", store_id="s1", external_id="S1", data={"ITEM_NAME": "Desk 1"}))
        await session.commit()
    await engine.dispose()


async def _space_labels(database_url: str) -> list[str]:
    engine = create_engine(database_url)
    try:
        async with create_session_factory(engine)() as session:
            space = await session.get(Space, "sp-1")
            assert space is not None
            return list(space.assigned_labels)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_from_config_reconciles_end_to_end(tmp_path: Path) -> None:
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'eslsync.db'}"
    await _seed_database(database_url)
    aims = _Aims({"OLD": {"articleId": "OLD", "articleName": "Gone", "data": {}}})
    aims.labels["S1"] = ["L1"]
    config = EslSyncConfig(database_url=database_url, auth="static", encryption_key=_SECRET)

    async with await EslSync.from_config(config, transport=httpx.MockTransport(aims)) as sync:
        assert isinstance(sync.gateway, AimsGateway)
        results = await sync.reconcile_all()

    assert len(results) == 1
    result = results[0]
    assert result.success is True
    assert (result.pushed, result.deleted, result.repaired) == (1, 1, 0)
    assert aims.logins == [{"username": "sync@acme", "password": "aims-password"}]
    assert set(aims.articles) == {"S1"}
    assert aims.articles["S1"]["data"] == {"ARTICLE_ID": "S1", "ITEM_NAME": "Desk 1"}
    assert await _space_labels(database_url) == ["L1"]


@pytest.mark.asyncio
async def test_from_config_dry_run_sends_no_writes(tmp_path: Path) -> None:
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'eslsync.db'}"
    await _seed_database(database_url)
    aims = _Aims({"OLD": {"articleId": "OLD", "articleName": "Gone", "data": {}}})
    config = EslSyncConfig(database_url=database_url, auth="static", encryption_key=_SECRET)

    async with await EslSync.from_config(config, dry_run=True, transport=httpx.MockTransport(aims)) as sync:
        assert sync.dry_run is True
        assert isinstance(sync.gateway, DryRunGateway)
        results = await sync.reconcile_all()
        operations = sync.gateway.operations

    assert (results[0].pushed, results[0].deleted, results[0].repaired) == (1, 1, 0)
    assert aims.writes == []
    assert set(aims.articles) == {"OLD"}
    assert [(operation.name, operation.article_ids) for operation in operations] == [
        ("push_articles", ("S1",)),
        ("delete_articles", ("OLD",)),
    ]


@pytest.mark.asyncio
async def test_from_config_env_auth_requires_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ESLSYNC_ENCRYPTION_KEY", raising=False)

    with pytest.raises(AuthenticationError, match="ESLSYNC_ENCRYPTION_KEY"):
        await EslSync.from_config(_config())
