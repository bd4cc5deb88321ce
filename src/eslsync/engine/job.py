"""Periodic reconciliation job with a single-flight tick guard."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from eslsync.contracts.result import ReconcileStoreResult
from eslsync.engine.engine import ReconcileEngine

_LOG = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_INITIAL_DELAY_SECONDS = 15.0


class ReconcileJob:
    """Owns the reconciliation timer.

    ``start()`` runs a first tick after *initial_delay_seconds* and then one
    every *interval_seconds*. A timer firing while the previous tick is still
    running is dropped, not queued.
    """

    def __init__(
        self,
        engine: ReconcileEngine,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        initial_delay_seconds: float = DEFAULT_INITIAL_DELAY_SECONDS,
    ) -> None:
        self._engine = engine
        self._interval_seconds = interval_seconds
        self._initial_delay_seconds = initial_delay_seconds
        self._in_flight = False
        self._timer: asyncio.Task[None] | None = None
        self._ticks: set[asyncio.Task[list[ReconcileStoreResult] | None]] = set()

    @property
    def is_started(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def start(self) -> None:
        if self.is_started:
            return
        _LOG.info(
            "Starting AIMS reconciliation job",
            extra={"interval_seconds": self._interval_seconds, "initial_delay_seconds": self._initial_delay_seconds},
        )
        self._timer = asyncio.create_task(self._run_timer(), name="eslsync-reconcile-timer")

    async def stop(self) -> None:
        timer, self._timer = self._timer, None
        pending = [task for task in (timer, *self._ticks) if task is not None]
        for task in pending:
            task.cancel()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._ticks.clear()
        if timer is not None:
            _LOG.info("Stopped AIMS reconciliation job")

    async def _run_timer(self) -> None:
        await asyncio.sleep(self._initial_delay_seconds)
        while True:
            task = asyncio.create_task(self.tick(), name="eslsync-reconcile-tick")
            self._ticks.add(task)
            task.add_done_callback(self._ticks.discard)
            await asyncio.sleep(self._interval_seconds)

    async def tick(self) -> list[ReconcileStoreResult] | None:
        """Run one pass over every eligible store; returns ``None`` when skipped."""
        if self._in_flight:
            _LOG.info("Previous reconcile tick still running, skipping")
            return None
        self._in_flight = True
        started = time.monotonic()
        try:
            results = await self._engine.reconcile_all()
        except Exception as exc:
            _LOG.error("Reconcile tick failed while enumerating stores: %s", exc, exc_info=True)
            return None
        finally:
            self._in_flight = False

        failed = sum(1 for result in results if not result.success)
        _LOG.info(
            "Reconcile tick complete",
            extra={
                "stores": len(results),
                "failed": failed,
                "pushed": sum(result.pushed for result in results),
                "deleted": sum(result.deleted for result in results),
                "repaired": sum(result.repaired for result in results),
                "duration_seconds": round(time.monotonic() - started, 3),
            },
        )
        return results

    async def reconcile_now(self) -> list[ReconcileStoreResult]:
        return await self._engine.reconcile_all()

    async def reconcile_store_now(self, store_id: str) -> ReconcileStoreResult:
        return await self._engine.reconcile_store_by_id(store_id)
