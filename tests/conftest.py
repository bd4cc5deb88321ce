"""Shared test fixtures for eslsync tests."""

from __future__ import annotations

import pytest

from eslsync.contracts.article import ArticleFormat, MappingInfo
from eslsync.contracts.domain import CompanyConnection


@pytest.fixture
def article_format() -> ArticleFormat:
    """A tenant format with every mapping populated."""
    return ArticleFormat(
        mapping_info=MappingInfo(
            store="STORE_ID",
            article_id="ARTICLE_ID",
            article_name="ITEM_NAME",
            nfc_url="NFC_URL",
        ),
        article_basic_info=["store", "articleId", "articleName", "nfcUrl"],
        article_data=[
            "STORE_ID",
            "ARTICLE_ID",
            "ITEM_NAME",
            "NFC_URL",
            "DEPARTMENT",
            "TITLE",
            "MEETING_NAME",
            "MEETING_TIME",
            "PARTICIPANTS",
        ],
    )


@pytest.fixture
def connection() -> CompanyConnection:
    return CompanyConnection(
        company_id="co-1",
        company_code="ACME",
        store_code="01",
        base_url="https://aims.example.com",
        cluster=None,
        username="sync@acme",
        password_enc="encrypted",
    )
