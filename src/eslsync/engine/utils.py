"""Engine utility helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from eslsync.articles.builder import (
    article_needs_update,
    build_conference_article,
    build_empty_slot_article,
    build_person_article,
    build_space_article,
)
from eslsync.contracts.article import Article, ArticleFormat
from eslsync.contracts.domain import ConferenceRoomRecord, PersonRecord, SpaceRecord
from eslsync.contracts.exceptions import ArticleBuildError
from eslsync.contracts.result import SyncMode
from eslsync.contracts.settings import CompanySettings, StoreSettings

_LOG = logging.getLogger(__name__)

MIN_DELETION_THRESHOLD = 5
MAX_DELETION_RATIO = 0.5
SAFETY_SAMPLE_SIZE = 20
REPAIR_SAMPLE_SIZE = 10


def resolve_sync_mode(company: CompanySettings, store: StoreSettings) -> SyncMode:
    """Resolve the operating mode for one store.

    Precedence: the company-level ``peopleManagerEnabled`` flag; when it is not
    set, the legacy store-level flag; otherwise spaces mode.
    """
    if company.people_manager_enabled:
        return SyncMode.PEOPLE
    if store.people_manager_enabled is True:
        return SyncMode.PEOPLE
    return SyncMode.SPACES


@dataclass
class DiffPlan:
    to_push: list[Article] = field(default_factory=list)
    to_delete: list[str] = field(default_factory=list)
    unchanged: int = 0


def diff_articles(expected: dict[str, Article], actual: dict[str, Article]) -> DiffPlan:
    plan = DiffPlan()
    for article_id, article in expected.items():
        observed = actual.get(article_id)
        if observed is None or article_needs_update(article, observed):
            plan.to_push.append(article)
        else:
            plan.unchanged += 1
    plan.to_delete = [article_id for article_id in actual if article_id not in expected]
    return plan


def exceeds_deletion_safety(delete_count: int, actual_count: int) -> bool:
    """Return ``True`` when deleting *delete_count* of *actual_count* articles must be refused."""
    return (
        delete_count >= MIN_DELETION_THRESHOLD
        and actual_count > 0
        and delete_count > actual_count * MAX_DELETION_RATIO
    )


def sample_ids(ids: Sequence[str], limit: int) -> str:
    sample = ", ".join(ids[:limit])
    if len(ids) > limit:
        sample += "..."
    return sample


def _add(expected: dict[str, Article], article: Article | None) -> None:
    if article is not None:
        expected[article.article_id] = article


def build_expected_articles(
    *,
    mode: SyncMode,
    settings: CompanySettings,
    article_format: ArticleFormat | None,
    conference_rooms: Iterable[ConferenceRoomRecord],
    people: Iterable[PersonRecord] = (),
    spaces: Iterable[SpaceRecord] = (),
) -> dict[str, Article]:
    """Build the expected article map for one store.

    Conference rooms are always included. People mode adds one article per
    assigned person plus an empty-slot article for every unoccupied slot in
    ``1..total_spaces``; spaces mode adds one article per space. Records that
    cannot be built are logged and left out.
    """
    mapping = settings.solum_mapping_config
    conference_mapping = mapping.resolved_conference_mapping()
    expected: dict[str, Article] = {}

    for room in conference_rooms:
        try:
            _add(expected, build_conference_article(room, article_format, conference_mapping))
        except ArticleBuildError as exc:
            _LOG.warning("Skipping conference room", extra={"record_id": room.id, "error": str(exc)})

    if mode is SyncMode.PEOPLE:
        occupied: set[str] = set()
        for person in people:
            article = build_person_article(person, article_format, mapping.global_field_assignments)
            if article is None:
                continue
            _add(expected, article)
            occupied.add(article.article_id)
        for slot in range(1, settings.people_manager_config.total_spaces + 1):
            slot_id = str(slot)
            if slot_id not in occupied:
                _add(expected, build_empty_slot_article(slot_id, article_format))
    else:
        for space in spaces:
            try:
                _add(expected, build_space_article(space, article_format))
            except ArticleBuildError as exc:
                _LOG.warning("Skipping space", extra={"record_id": space.id, "error": str(exc)})

    return expected
