"""Tenant settings documents, parsed and validated at load time.

Company and store rows carry loosely-typed JSON ``settings`` blobs. These
models give them named, optional fields with defaults so the engine never
does ad hoc key lookups. Unknown keys are ignored and explicit nulls fall
back to the field default; a document that still fails validation raises
:class:`ConfigError` for the owning store only.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from eslsync.contracts.article import ArticleFormat
from eslsync.contracts.exceptions import ConfigError

SETTINGS_SCHEMA_VERSION = 1


class _SettingsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ConferenceMapping(_SettingsModel):
    meeting_name: str = ""
    meeting_time: str = ""
    participants: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.meeting_name and self.meeting_time and self.participants)


class SolumMappingConfig(_SettingsModel):
    unique_id_field: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    conference_mapping: ConferenceMapping | None = None
    global_field_assignments: dict[str, Any] = Field(default_factory=dict)

    def resolved_conference_mapping(self) -> ConferenceMapping | None:
        """Return the conference mapping only when every meeting field is mapped."""
        if self.conference_mapping is None or not self.conference_mapping.is_complete:
            return None
        return self.conference_mapping


class PeopleManagerConfig(_SettingsModel):
    total_spaces: int = Field(default=0, ge=0)


class CompanySettings(_SettingsModel):
    settings_version: int = SETTINGS_SCHEMA_VERSION
    people_manager_enabled: bool = False
    people_manager_config: PeopleManagerConfig = Field(default_factory=PeopleManagerConfig)
    solum_mapping_config: SolumMappingConfig = Field(default_factory=SolumMappingConfig)
    solum_article_format: ArticleFormat | None = None


class StoreSettings(_SettingsModel):
    settings_version: int = SETTINGS_SCHEMA_VERSION
    # Legacy location of the mode flag, superseded by the company-level one.
    people_manager_enabled: bool | None = None


def _parse(model: type[_SettingsModel], raw: Any, owner: str) -> Any:
    if raw is None:
        return model()
    if not isinstance(raw, dict):
        raise ConfigError(f"{owner} settings must be a JSON object, got {type(raw).__name__}")
    try:
        parsed = model.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid {owner} settings: {exc}") from exc
    version = getattr(parsed, "settings_version", SETTINGS_SCHEMA_VERSION)
    if version > SETTINGS_SCHEMA_VERSION:
        raise ConfigError(
            f"{owner} settings version {version} is newer than supported version {SETTINGS_SCHEMA_VERSION}"
        )
    return parsed


def parse_company_settings(raw: Any) -> CompanySettings:
    return _parse(CompanySettings, raw, "company")


def parse_store_settings(raw: Any) -> StoreSettings:
    return _parse(StoreSettings, raw, "store")
