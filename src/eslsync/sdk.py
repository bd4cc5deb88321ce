"""SDK composition root for eslsync."""

from __future__ import annotations

import asyncio
import contextlib
import json
from pathlib import Path
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine

from eslsync.auth import PasswordCipher, create_secret_resolver
from eslsync.contracts.config import EslSyncConfig
from eslsync.contracts.exceptions import ConfigError
from eslsync.contracts.gateway import Gateway
from eslsync.contracts.repository import ReconcileRepository
from eslsync.contracts.result import ReconcileStoreResult
from eslsync.engine import ReconcileEngine, ReconcileJob
from eslsync.engine.progress import ReconcileProgress
from eslsync.gateway import AimsGateway, DryRunGateway
from eslsync.persistence import SqlReconcileRepository, create_engine, create_session_factory, init_database
from eslsync.settings import SettingsCache

_SQLITE_FILE_MARKER = ":///"


def _resolve_database_url(database_url: str, *, base_dir: Path) -> str:
    """Anchor a relative SQLite file path to *base_dir*; other URLs pass through."""
    if not database_url.startswith("sqlite") or _SQLITE_FILE_MARKER not in database_url:
        return database_url
    scheme, _, file_path = database_url.partition(_SQLITE_FILE_MARKER)
    if not file_path or file_path.startswith(":memory:") or Path(file_path).is_absolute():
        return database_url
    return f"{scheme}{_SQLITE_FILE_MARKER}{(base_dir / file_path).resolve()}"


def load_config(path: str | Path) -> EslSyncConfig:
    """Load and validate config from JSON, resolving relative SQLite paths against the config directory."""
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = EslSyncConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    return parsed.model_copy(
        update={"database_url": _resolve_database_url(parsed.database_url, base_dir=config_dir)}
    )


class EslSync:
    """eslsync SDK public API.

    Use as an async context manager so HTTP clients and database connections
    are released::

        async with await EslSync.from_config(config) as sync:
            results = await sync.reconcile_all()
    """

    def __init__(
        self,
        *,
        config: EslSyncConfig,
        gateway: Gateway,
        repository: ReconcileRepository,
        dry_run: bool = False,
        progress: ReconcileProgress | None = None,
        database_engine: AsyncEngine | None = None,
    ) -> None:
        self._config = config
        self._gateway = gateway
        self._repository = repository
        self._dry_run = dry_run
        self._database_engine = database_engine
        self._settings_cache = SettingsCache(
            repository.get_company_settings, ttl_seconds=config.settings_ttl_seconds
        )
        self._engine = ReconcileEngine(
            gateway,
            repository,
            self._settings_cache,
            max_concurrent_stores=config.max_concurrent_stores,
            dry_run=dry_run,
            progress=progress,
        )

    @classmethod
    async def from_config(
        cls,
        config: EslSyncConfig,
        *,
        dry_run: bool = False,
        progress: ReconcileProgress | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> EslSync:
        resolver = create_secret_resolver(config)
        cipher = PasswordCipher(await resolver.resolve())

        database_engine = create_engine(config.database_url)
        repository = SqlReconcileRepository(create_session_factory(database_engine))
        gateway: Gateway = AimsGateway(
            repository=repository,
            decrypt_password=cipher.decrypt,
            config=config.gateway,
            transport=transport,
        )
        if dry_run:
            gateway = DryRunGateway(gateway)
        return cls(
            config=config,
            gateway=gateway,
            repository=repository,
            dry_run=dry_run,
            progress=progress,
            database_engine=database_engine,
        )

    @property
    def config(self) -> EslSyncConfig:
        return self._config

    @property
    def gateway(self) -> Gateway:
        return self._gateway

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    async def __aenter__(self) -> EslSync:
        await self._gateway.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        try:
            await self._gateway.__aexit__(None, None, None)
        finally:
            if self._database_engine is not None:
                await self._database_engine.dispose()

    async def initialize_database(self) -> None:
        """Create the mapped tables for local and test databases."""
        if self._database_engine is None:
            raise ConfigError("no database engine configured")
        await init_database(self._database_engine)

    async def reconcile_all(self) -> list[ReconcileStoreResult]:
        return await self._engine.reconcile_all()

    async def reconcile_store(self, store_id: str) -> ReconcileStoreResult:
        return await self._engine.reconcile_store_by_id(store_id)

    def create_job(self) -> ReconcileJob:
        return ReconcileJob(
            self._engine,
            interval_seconds=self._config.interval_seconds,
            initial_delay_seconds=self._config.initial_delay_seconds,
        )

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run the periodic job until *stop_event* is set."""
        job = self.create_job()
        job.start()
        try:
            await stop_event.wait()
        finally:
            with contextlib.suppress(asyncio.CancelledError):
                await job.stop()
