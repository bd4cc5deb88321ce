"""Article builders."""

from eslsync.articles.builder import (
    article_needs_update,
    build_conference_article,
    build_empty_slot_article,
    build_person_article,
    build_space_article,
)

__all__ = [
    "article_needs_update",
    "build_conference_article",
    "build_empty_slot_article",
    "build_person_article",
    "build_space_article",
]
