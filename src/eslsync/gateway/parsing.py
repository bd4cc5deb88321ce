"""Normalization of raw AIMS payloads.

Upstream responses are inconsistent: article ids arrive as ``articleId`` or
``article_id``, listings come bare or wrapped in ``articleList``/``content``/
``data`` envelopes, and an empty page may be a 204 with no body. All of that
is absorbed here so the rest of the package only sees contract models.
"""

from __future__ import annotations

from typing import Any

from eslsync.contracts.article import Article, ArticleFormat, ArticleInfo
from eslsync.contracts.exceptions import GatewayError

_LIST_ENVELOPE_KEYS = ("articleList", "content", "data")


def _str_or_empty(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def article_id_of(raw: dict[str, Any]) -> str | None:
    value = raw.get("articleId") or raw.get("article_id")
    if value is None or value == "":
        return None
    return str(value)


def extract_article_list(payload: Any) -> list[dict[str, Any]]:
    """Return the article records of one listing page."""
    if payload is None or payload == "":
        return []
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict):
        records = []
        for key in _LIST_ENVELOPE_KEYS:
            candidate = payload.get(key)
            if candidate:
                records = candidate
                break
    else:
        raise GatewayError(f"Unexpected article listing payload type: {type(payload).__name__}")
    if not isinstance(records, list):
        raise GatewayError("Article listing envelope does not contain a list")
    return [record for record in records if isinstance(record, dict)]


def parse_article(raw: dict[str, Any]) -> Article | None:
    """Build an :class:`Article` from a raw record, or ``None`` when it has no id."""
    article_id = article_id_of(raw)
    if article_id is None:
        return None
    raw_data = raw.get("data")
    data = (
        {str(key): _str_or_empty(value) for key, value in raw_data.items()} if isinstance(raw_data, dict) else {}
    )
    return Article(
        article_id=article_id,
        article_name=_str_or_empty(raw.get("articleName") or raw.get("article_name")),
        nfc_url=_str_or_empty(raw.get("nfcUrl") or raw.get("nfc_url")),
        data=data,
    )


def parse_article_info(raw: dict[str, Any]) -> ArticleInfo | None:
    article_id = article_id_of(raw)
    if article_id is None:
        return None
    labels = raw.get("assignedLabel")
    if labels is None:
        labels = raw.get("assigned_label")
    assigned = [str(label) for label in labels] if isinstance(labels, list) else None
    return ArticleInfo(article_id=article_id, assigned_label=assigned)


def parse_article_format(payload: Any) -> ArticleFormat:
    if isinstance(payload, dict) and isinstance(payload.get("responseMessage"), dict):
        payload = payload["responseMessage"]
    if not isinstance(payload, dict):
        raise GatewayError("Article format payload is not an object")
    return ArticleFormat.model_validate(payload)


def serialize_article(article: Article) -> dict[str, Any]:
    return {
        "articleId": article.article_id,
        "articleName": article.article_name,
        "nfcUrl": article.nfc_url,
        "data": dict(article.data),
    }


def parse_token_payload(payload: Any) -> tuple[str, float]:
    """Return ``(access_token, expires_in_seconds)`` from a login response."""
    if not isinstance(payload, dict):
        raise GatewayError("Login response is not an object")
    message = payload.get("responseMessage")
    if not isinstance(message, dict):
        raise GatewayError("Missing/invalid object at key 'responseMessage'")
    token = message.get("access_token")
    if not isinstance(token, str) or not token:
        raise GatewayError("Missing/invalid string at key 'access_token'")
    expires_in = message.get("expires_in")
    if not isinstance(expires_in, int | float) or isinstance(expires_in, bool):
        raise GatewayError("Missing/invalid number at key 'expires_in'")
    return token, float(expires_in)
