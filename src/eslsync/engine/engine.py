"""Per-store reconciliation engine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from eslsync.contracts.article import CONFERENCE_ARTICLE_PREFIX, Article, ArticleFormat
from eslsync.contracts.domain import StoreRecord
from eslsync.contracts.exceptions import EslSyncError
from eslsync.contracts.gateway import Gateway
from eslsync.contracts.repository import ReconcileRepository
from eslsync.contracts.result import ReconcileStoreResult, SyncMode
from eslsync.contracts.settings import parse_store_settings
from eslsync.engine.progress import NullReconcileProgress, ReconcileProgress
from eslsync.engine.utils import (
    REPAIR_SAMPLE_SIZE,
    SAFETY_SAMPLE_SIZE,
    build_expected_articles,
    diff_articles,
    exceeds_deletion_safety,
    resolve_sync_mode,
    sample_ids,
)
from eslsync.settings.cache import SettingsCache

_LOG = logging.getLogger(__name__)
_PHASE = "Reconcile"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ReconcileEngine:
    """Converge AIMS to the database, one store at a time.

    ``reconcile_store`` never raises: every failure is recorded on the
    returned :class:`ReconcileStoreResult`. Only store enumeration in
    ``reconcile_all`` may propagate.
    """

    def __init__(
        self,
        gateway: Gateway,
        repository: ReconcileRepository,
        settings_cache: SettingsCache,
        *,
        max_concurrent_stores: int = 1,
        dry_run: bool = False,
        progress: ReconcileProgress | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._gateway = gateway
        self._repository = repository
        self._settings_cache = settings_cache
        self._max_concurrent_stores = max(1, max_concurrent_stores)
        self._dry_run = dry_run
        self._progress: ReconcileProgress = progress or NullReconcileProgress()
        self._clock = clock

    async def reconcile_all(self) -> list[ReconcileStoreResult]:
        stores = await self._repository.list_sync_stores()
        self._progress.phase_start(_PHASE, total=len(stores))
        try:
            if self._max_concurrent_stores == 1:
                results = []
                for store in stores:
                    results.append(await self._reconcile_tracked(store))
            else:
                results = await self._reconcile_concurrently(stores)
            self._progress.phase_done(_PHASE)
        except BaseException as exc:
            self._progress.phase_error(_PHASE, exc)
            raise
        return results

    async def reconcile_store_by_id(self, store_id: str) -> ReconcileStoreResult:
        store = await self._repository.get_store(store_id)
        self._progress.phase_start(_PHASE, total=1)
        result = await self._reconcile_tracked(store)
        self._progress.phase_done(_PHASE)
        return result

    async def _reconcile_concurrently(self, stores: list[StoreRecord]) -> list[ReconcileStoreResult]:
        semaphore = asyncio.Semaphore(self._max_concurrent_stores)
        results: list[ReconcileStoreResult | None] = [None] * len(stores)

        async def run(index: int, store: StoreRecord) -> None:
            async with semaphore:
                results[index] = await self._reconcile_tracked(store)

        async with asyncio.TaskGroup() as tg:
            for index, store in enumerate(stores):
                tg.create_task(run(index, store))
        return [result for result in results if result is not None]

    async def _reconcile_tracked(self, store: StoreRecord) -> ReconcileStoreResult:
        result = await self.reconcile_store(store)
        self._log_result(result)
        self._progress.item_done(_PHASE)
        return result

    async def reconcile_store(self, store: StoreRecord) -> ReconcileStoreResult:
        result = ReconcileStoreResult(store_id=store.id, store_name=store.display_name)
        try:
            await self._reconcile(store, result)
        except Exception as exc:
            _LOG.exception("Unexpected reconcile failure", extra={"store_id": store.id})
            result.success = False
            result.error = f"Unexpected error: {exc}"
        return result

    async def _reconcile(self, store: StoreRecord, result: ReconcileStoreResult) -> None:
        log_extra = {"store_id": store.id, "store_name": store.display_name}

        # 1. Settings and mode.
        try:
            company_settings = await self._settings_cache.get(store.company_id)
            store_settings = parse_store_settings(store.settings)
        except EslSyncError as exc:
            result.success = False
            result.error = f"Failed to load settings: {exc}"
            return
        mode = resolve_sync_mode(company_settings, store_settings)
        result.mode = mode
        log_extra["mode"] = mode.value

        # 2. Article format (soft).
        article_format: ArticleFormat | None = None
        try:
            article_format = await self._gateway.fetch_article_format(store.id)
        except EslSyncError as exc:
            _LOG.warning(
                "Could not fetch article format; articles will be sent without format mapping",
                extra={**log_extra, "error": str(exc)},
            )

        # 3. Expected state.
        try:
            rooms = await self._repository.list_conference_rooms(store.id)
            if mode is SyncMode.PEOPLE:
                people = await self._repository.list_assigned_people(store.id)
                spaces = []
            else:
                people = []
                spaces = await self._repository.list_spaces(store.id)
        except EslSyncError as exc:
            result.success = False
            result.error = f"Failed to load database state: {exc}"
            return
        expected = build_expected_articles(
            mode=mode,
            settings=company_settings,
            article_format=article_format,
            conference_rooms=rooms,
            people=people,
            spaces=spaces,
        )
        result.total_expected = len(expected)

        # 4. Actual state.
        try:
            pulled = await self._gateway.pull_articles(store.id)
        except EslSyncError as exc:
            result.success = False
            result.error = f"Failed to fetch AIMS articles: {exc}"
            return
        actual = {article.article_id: article for article in pulled.articles}
        result.total_in_aims = len(actual)
        result.truncated = pulled.truncated

        # 5. Diff.
        plan = diff_articles(expected, actual)
        result.unchanged = plan.unchanged

        # 6. Push.
        if plan.to_push:
            try:
                await self._gateway.push_articles(store.id, plan.to_push)
            except EslSyncError as exc:
                _LOG.error("Push failed", extra={**log_extra, "error": str(exc)})
                result.success = False
                result.error = f"Push failed: {exc}"
                return
            result.pushed = len(plan.to_push)

        # 7. Guarded delete.
        if exceeds_deletion_safety(len(plan.to_delete), len(actual)):
            _LOG.error(
                "SAFETY: refusing to delete %d of %d AIMS articles for %s (%s); expected map has %d articles",
                len(plan.to_delete),
                len(actual),
                store.display_name,
                mode.value,
                len(expected),
                extra={**log_extra, "skipped_ids": sample_ids(plan.to_delete, SAFETY_SAMPLE_SIZE)},
            )
            result.error = f"Safety: refused mass deletion of {len(plan.to_delete)}/{len(actual)} articles"
        elif plan.to_delete:
            try:
                await self._gateway.delete_articles(store.id, plan.to_delete)
            except EslSyncError as exc:
                _LOG.error("Delete failed", extra={**log_extra, "error": str(exc)})
                result.error = f"Delete failed ({len(plan.to_delete)} stale articles): {exc}"
            else:
                result.deleted = len(plan.to_delete)

        # 8. Validation and repair.
        result.repaired = await self._validate_and_repair(store, expected, log_extra)

        # 9. Bookkeeping.
        if self._dry_run:
            return
        try:
            await self._repository.touch_store_sync(store.id, self._clock())
        except EslSyncError as exc:
            _LOG.warning("Failed to update last sync timestamp", extra={**log_extra, "error": str(exc)})

    async def _validate_and_repair(
        self, store: StoreRecord, expected: dict[str, Article], log_extra: dict[str, str]
    ) -> int:
        try:
            infos = await self._gateway.pull_article_info(store.id)
            with_labels = sum(1 for info in infos if info.assigned_label)
            _LOG.info(
                "Fetched article info",
                extra={**log_extra, "articles": len(infos), "with_labels": with_labels},
            )

            for info in infos:
                if info.assigned_label is None:
                    continue
                if self._dry_run:
                    continue
                if info.article_id.startswith(CONFERENCE_ARTICLE_PREFIX):
                    await self._repository.update_conference_room_labels(
                        store.id, info.article_id[len(CONFERENCE_ARTICLE_PREFIX) :], info.assigned_label
                    )
                else:
                    await self._repository.update_space_labels(store.id, info.article_id, info.assigned_label)

            observed = {info.article_id for info in infos}
            missing = [article_id for article_id in expected if article_id not in observed]
            extra = [article_id for article_id in observed if article_id not in expected]
            if extra:
                _LOG.warning(
                    "Validation: %d unexpected article(s) in AIMS article info",
                    len(extra),
                    extra={**log_extra, "ids": sample_ids(extra, REPAIR_SAMPLE_SIZE)},
                )
            if not missing:
                return 0
            _LOG.warning(
                "Validation: %d expected article(s) missing from AIMS, repairing",
                len(missing),
                extra={**log_extra, "ids": sample_ids(missing, REPAIR_SAMPLE_SIZE)},
            )
        except Exception as exc:
            _LOG.error(
                "Failed to sync assigned labels from article info",
                extra={**log_extra, "error": str(exc)},
                exc_info=True,
            )
            return 0

        try:
            await self._gateway.push_articles(store.id, [expected[article_id] for article_id in missing])
        except Exception as exc:
            _LOG.error("Repair push failed", extra={**log_extra, "error": str(exc)}, exc_info=True)
            return 0
        _LOG.warning(
            "Repaired %d article(s) missing from AIMS",
            len(missing),
            extra={**log_extra, "ids": sample_ids(missing, REPAIR_SAMPLE_SIZE)},
        )
        return len(missing)

    @staticmethod
    def _log_result(result: ReconcileStoreResult) -> None:
        extra = result.model_dump(mode="json")
        if not result.success:
            _LOG.warning("Store reconcile failed: %s", result.error, extra=extra)
        elif result.error:
            _LOG.warning("Store reconciled with errors: %s", result.error, extra=extra)
        elif result.has_changes:
            _LOG.info(
                "Store reconciled: pushed=%d deleted=%d repaired=%d unchanged=%d",
                result.pushed,
                result.deleted,
                result.repaired,
                result.unchanged,
                extra=extra,
            )
        else:
            _LOG.debug("Store already in sync", extra=extra)
