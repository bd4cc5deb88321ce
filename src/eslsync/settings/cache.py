"""Short-lived cache of parsed company settings."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from cachetools import TTLCache

from eslsync.contracts.settings import CompanySettings

_LOG = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
DEFAULT_MAX_COMPANIES = 1024

SettingsLoader = Callable[[str], Awaitable[CompanySettings]]


class SettingsCache:
    """TTL cache of :class:`CompanySettings` keyed by company id.

    Reads may be up to ``ttl_seconds`` stale. Concurrent misses for the same
    company each load and the last one to finish wins; the loader is awaited
    outside the lock so a slow database read never blocks hits for other
    companies.
    """

    def __init__(
        self,
        loader: SettingsLoader,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        maxsize: int = DEFAULT_MAX_COMPANIES,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._cache: TTLCache[str, CompanySettings] = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        self._lock = asyncio.Lock()

    async def get(self, company_id: str) -> CompanySettings:
        async with self._lock:
            cached = self._cache.get(company_id)
        if cached is not None:
            return cached

        _LOG.debug("Company settings cache miss", extra={"company_id": company_id})
        settings = await self._loader(company_id)
        async with self._lock:
            self._cache[company_id] = settings
        return settings

    async def invalidate(self, company_id: str) -> None:
        async with self._lock:
            self._cache.pop(company_id, None)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()
