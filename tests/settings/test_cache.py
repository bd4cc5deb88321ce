from __future__ import annotations

import pytest

from eslsync.contracts.settings import CompanySettings, PeopleManagerConfig
from eslsync.settings import SettingsCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _Loader:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.total_spaces = 1

    async def __call__(self, company_id: str) -> CompanySettings:
        self.calls.append(company_id)
        return CompanySettings(people_manager_config=PeopleManagerConfig(total_spaces=self.total_spaces))


@pytest.mark.asyncio
async def test_hit_within_ttl_skips_loader() -> None:
    loader = _Loader()
    clock = _Clock()
    cache = SettingsCache(loader, ttl_seconds=60, timer=clock)

    first = await cache.get("co-1")
    clock.now = 59
    second = await cache.get("co-1")

    assert first is second
    assert loader.calls == ["co-1"]


@pytest.mark.asyncio
async def test_entry_expires_after_ttl() -> None:
    loader = _Loader()
    clock = _Clock()
    cache = SettingsCache(loader, ttl_seconds=60, timer=clock)

    await cache.get("co-1")
    loader.total_spaces = 5
    clock.now = 61
    refreshed = await cache.get("co-1")

    assert refreshed.people_manager_config.total_spaces == 5
    assert loader.calls == ["co-1", "co-1"]


@pytest.mark.asyncio
async def test_companies_are_cached_independently() -> None:
    loader = _Loader()
    cache = SettingsCache(loader, timer=_Clock())

    await cache.get("co-1")
    await cache.get("co-2")
    await cache.get("co-1")

    assert loader.calls == ["co-1", "co-2"]


@pytest.mark.asyncio
async def test_invalidate_and_clear_force_reload() -> None:
    loader = _Loader()
    cache = SettingsCache(loader, timer=_Clock())

    await cache.get("co-1")
    await cache.invalidate("co-1")
    await cache.get("co-1")
    await cache.clear()
    await cache.get("co-1")

    assert loader.calls == ["co-1", "co-1", "co-1"]


@pytest.mark.asyncio
async def test_loader_errors_propagate_and_are_not_cached() -> None:
    calls: list[str] = []

    async def failing_loader(company_id: str) -> CompanySettings:
        calls.append(company_id)
        raise RuntimeError("db down")

    cache = SettingsCache(failing_loader, timer=_Clock())

    with pytest.raises(RuntimeError, match="db down"):
        await cache.get("co-1")
    with pytest.raises(RuntimeError, match="db down"):
        await cache.get("co-1")

    assert calls == ["co-1", "co-1"]
