"""Article contracts shared by the builder, the engine and the gateway."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CONFERENCE_ARTICLE_PREFIX = "C"


class MappingInfo(BaseModel):
    """Which tenant data keys carry the article's core attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    store: str | None = None
    article_id: str | None = None
    article_name: str | None = None
    nfc_url: str | None = None


class ArticleFormat(BaseModel):
    """Tenant article schema as published by the label-management system."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    file_extension: str = "csv"
    # Upstream spells it this way.
    delimeter: str = ";"
    mapping_info: MappingInfo = Field(default_factory=MappingInfo)
    article_basic_info: list[str] = Field(default_factory=list)
    article_data: list[str] = Field(default_factory=list)


class Article(BaseModel):
    """Normalized article record; ``article_id`` is the reconciliation join key."""

    article_id: str
    article_name: str = ""
    nfc_url: str = ""
    data: dict[str, str] = Field(default_factory=dict)


class ArticleInfo(BaseModel):
    """Live article status; ``assigned_label`` is ``None`` when upstream omitted it."""

    article_id: str
    assigned_label: list[str] | None = None


class PulledArticles(BaseModel):
    articles: list[Article] = Field(default_factory=list)
    truncated: bool = False
