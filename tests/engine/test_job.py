from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from eslsync.contracts.exceptions import RepositoryError
from eslsync.contracts.result import ReconcileStoreResult
from eslsync.engine.job import ReconcileJob


def _engine(results: list[ReconcileStoreResult] | None = None) -> MagicMock:
    engine = MagicMock()
    engine.reconcile_all = AsyncMock(return_value=results or [])
    engine.reconcile_store_by_id = AsyncMock()
    return engine


async def _wait_for(predicate, timeout: float = 1.0) -> None:  # type: ignore[no-untyped-def]
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(poll(), timeout)


@pytest.mark.asyncio
async def test_tick_returns_results_and_clears_flag() -> None:
    results = [
        ReconcileStoreResult(store_id="s1", store_name="One", pushed=2),
        ReconcileStoreResult(store_id="s2", store_name="Two", success=False, error="Push failed: boom"),
    ]
    job = ReconcileJob(_engine(results))

    assert await job.tick() == results
    assert job.in_flight is False


@pytest.mark.asyncio
async def test_tick_is_skipped_while_previous_tick_runs() -> None:
    release = asyncio.Event()
    engine = _engine()

    async def blocked() -> list[ReconcileStoreResult]:
        await release.wait()
        return []

    engine.reconcile_all.side_effect = blocked
    job = ReconcileJob(engine)

    first = asyncio.create_task(job.tick())
    await _wait_for(lambda: job.in_flight)
    skipped = await job.tick()
    release.set()
    completed = await first

    assert skipped is None
    assert completed == []
    assert engine.reconcile_all.await_count == 1
    assert job.in_flight is False


@pytest.mark.asyncio
async def test_tick_survives_enumeration_failure() -> None:
    engine = _engine()
    engine.reconcile_all.side_effect = RepositoryError("db down")
    job = ReconcileJob(engine)

    assert await job.tick() is None
    assert job.in_flight is False


@pytest.mark.asyncio
async def test_start_runs_initial_tick_then_on_interval_until_stopped() -> None:
    engine = _engine()
    job = ReconcileJob(engine, interval_seconds=0.01, initial_delay_seconds=0)

    job.start()
    assert job.is_started is True
    await _wait_for(lambda: engine.reconcile_all.await_count >= 2)
    await job.stop()
    calls = engine.reconcile_all.await_count
    await asyncio.sleep(0.03)

    assert job.is_started is False
    assert engine.reconcile_all.await_count == calls


@pytest.mark.asyncio
async def test_start_waits_for_initial_delay() -> None:
    engine = _engine()
    job = ReconcileJob(engine, interval_seconds=60, initial_delay_seconds=60)

    job.start()
    await asyncio.sleep(0.01)
    await job.stop()

    engine.reconcile_all.assert_not_awaited()


@pytest.mark.asyncio
async def test_start_is_idempotent() -> None:
    job = ReconcileJob(_engine(), interval_seconds=60, initial_delay_seconds=60)

    job.start()
    timer = job._timer
    job.start()

    assert job._timer is timer
    await job.stop()


@pytest.mark.asyncio
async def test_stop_cancels_running_tick() -> None:
    started = asyncio.Event()
    engine = _engine()

    async def hang() -> list[ReconcileStoreResult]:
        started.set()
        await asyncio.Event().wait()
        return []

    engine.reconcile_all.side_effect = hang
    job = ReconcileJob(engine, interval_seconds=60, initial_delay_seconds=0)

    job.start()
    await asyncio.wait_for(started.wait(), 1.0)
    await job.stop()

    assert job.in_flight is False
    assert job.is_started is False


@pytest.mark.asyncio
async def test_manual_triggers_delegate_to_engine() -> None:
    result = ReconcileStoreResult(store_id="s1", store_name="One")
    engine = _engine([result])
    engine.reconcile_store_by_id.return_value = result
    job = ReconcileJob(engine)

    assert await job.reconcile_now() == [result]
    assert await job.reconcile_store_now("s1") is result
    engine.reconcile_store_by_id.assert_awaited_once_with("s1")
