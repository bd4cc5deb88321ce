"""Pure transforms from domain records to normalized articles.

An upstream article carries generic top-level keys (``articleId``,
``articleName``, ``nfcUrl``) plus a ``data`` object keyed by the tenant's own
column names. The article format's ``mapping_info`` says which data columns
mirror the top-level keys; every other non-empty entity field is copied into
``data`` verbatim (stringified).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from eslsync.contracts.article import CONFERENCE_ARTICLE_PREFIX, Article, ArticleFormat
from eslsync.contracts.domain import ConferenceRoomRecord, PersonRecord, SpaceRecord
from eslsync.contracts.exceptions import ArticleBuildError
from eslsync.contracts.settings import ConferenceMapping

_DEFAULT_PERSON_NAME = "Person"


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _lookup(data: Mapping[str, Any], key: str | None) -> str | None:
    if not key:
        return None
    value = data.get(key)
    if _is_blank(value):
        return None
    return _stringify(value)


def _build_article(
    article_id: str,
    article_name: str,
    nfc_url: str,
    entity_data: Mapping[str, Any],
    article_format: ArticleFormat | None,
) -> Article:
    if article_format is None:
        data = {key: _stringify(value) for key, value in entity_data.items() if not _is_blank(value)}
        return Article(article_id=article_id, article_name=article_name, nfc_url=nfc_url, data=data)

    mapping = article_format.mapping_info
    data: dict[str, str] = {}
    if mapping.article_id:
        data[mapping.article_id] = article_id
    if mapping.article_name:
        data[mapping.article_name] = article_name
    if mapping.nfc_url and nfc_url:
        data[mapping.nfc_url] = nfc_url

    # Upstream fills the store column itself.
    for key, value in entity_data.items():
        if key.startswith("_") or key == mapping.store:
            continue
        if _is_blank(value) or key in data:
            continue
        data[key] = _stringify(value)

    return Article(article_id=article_id, article_name=article_name, nfc_url=nfc_url, data=data)


def _require_id(value: str | None, what: str) -> str:
    article_id = (value or "").strip()
    if not article_id:
        raise ArticleBuildError(f"{what} must be a non-empty string")
    return article_id


def build_space_article(space: SpaceRecord, article_format: ArticleFormat | None) -> Article:
    """Build the article for a space; its id is the space's external id."""
    article_id = _require_id(space.external_id, "space external_id")
    mapping = article_format.mapping_info if article_format is not None else None
    name = _lookup(space.data, mapping.article_name if mapping else None) or article_id
    nfc_url = _lookup(space.data, mapping.nfc_url if mapping else None) or ""
    return _build_article(article_id, name, nfc_url, space.data, article_format)


def build_person_article(
    person: PersonRecord,
    article_format: ArticleFormat | None,
    global_field_assignments: Mapping[str, Any] | None = None,
) -> Article | None:
    """Build the slot article for an assigned person, or ``None`` when unassigned.

    Company-wide ``global_field_assignments`` only fill fields that are missing
    or empty in the person's own data.
    """
    slot_id = (person.assigned_space_id or "").strip()
    if not slot_id:
        return None

    data: dict[str, Any] = dict(person.data)
    for key, value in (global_field_assignments or {}).items():
        if _is_blank(data.get(key)) and not _is_blank(value):
            data[key] = _stringify(value)

    mapping = article_format.mapping_info if article_format is not None else None
    name = (
        _lookup(data, mapping.article_name if mapping else None)
        or _lookup(data, "name")
        or _lookup(data, "NAME")
        or _DEFAULT_PERSON_NAME
    )
    nfc_url = _lookup(data, mapping.nfc_url if mapping else None) or ""
    return _build_article(slot_id, name, nfc_url, data, article_format)


def build_empty_slot_article(slot_id: str | int, article_format: ArticleFormat | None) -> Article:
    """Build the placeholder article for an unoccupied slot.

    Only the mapped id column carries a value. Every other column the format
    declares is blanked so the label stops showing the previous occupant.
    """
    if isinstance(slot_id, int):
        if slot_id <= 0:
            raise ArticleBuildError(f"slot id must be positive, got {slot_id}")
        slot_id = str(slot_id)
    article_id = _require_id(slot_id, "slot id")

    data: dict[str, str] = {}
    if article_format is not None:
        mapping = article_format.mapping_info
        for key in article_format.article_data:
            if key != mapping.store:
                data[key] = ""
        if mapping.article_name:
            data[mapping.article_name] = ""
        if mapping.article_id:
            data[mapping.article_id] = article_id
    return Article(article_id=article_id, article_name="", nfc_url="", data=data)


def build_conference_article(
    room: ConferenceRoomRecord,
    article_format: ArticleFormat | None,
    conference_mapping: ConferenceMapping | None = None,
) -> Article:
    """Build a meeting-room article; ids are prefixed to stay apart from spaces and slots."""
    external_id = _require_id(room.external_id, "conference room external_id")
    article_id = f"{CONFERENCE_ARTICLE_PREFIX}{external_id}"
    name = room.room_name or f"Conference {external_id}"

    data: dict[str, Any] = dict(room.data)
    if conference_mapping is not None and conference_mapping.is_complete:
        if room.has_meeting:
            meeting_name = room.meeting_name or ""
            start, end = room.start_time or "", room.end_time or ""
            meeting_time = f"{start} - {end}" if start and end else start
            participants = ", ".join(room.participants)
        else:
            meeting_name = meeting_time = participants = ""
        data[conference_mapping.meeting_name] = meeting_name
        data[conference_mapping.meeting_time] = meeting_time
        data[conference_mapping.participants] = participants

    article = _build_article(article_id, name, "", data, article_format)
    if conference_mapping is not None and conference_mapping.is_complete:
        # Blank meeting columns must still be compared and pushed.
        for key in (conference_mapping.meeting_name, conference_mapping.meeting_time, conference_mapping.participants):
            article.data.setdefault(key, data[key])
    return article


def article_needs_update(expected: Article, observed: Article) -> bool:
    """Return ``True`` when *observed* differs from *expected* on any managed field.

    Article names are compared with absence treated as empty. Only keys present
    in ``expected.data`` are compared; columns the observed article carries
    beyond those are not owned locally and never trigger an update.
    """
    if (expected.article_name or "") != (observed.article_name or ""):
        return True
    for key, value in expected.data.items():
        if (value or "") != (observed.data.get(key) or ""):
            return True
    return False
