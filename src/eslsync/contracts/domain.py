"""Domain records read from (and partially written to) the database."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class StoreRecord(BaseModel):
    id: str
    code: str
    name: str = ""
    company_id: str
    # Raw document; parsed with parse_store_settings when the store is reconciled.
    settings: Any = None
    sync_enabled: bool = True
    is_active: bool = True
    last_aims_sync_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.code


class SpaceRecord(BaseModel):
    id: str
    store_id: str
    external_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    assigned_labels: list[str] = Field(default_factory=list)


class PersonRecord(BaseModel):
    id: str
    store_id: str
    assigned_space_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class ConferenceRoomRecord(BaseModel):
    id: str
    store_id: str
    external_id: str
    room_name: str = ""
    has_meeting: bool = False
    meeting_name: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    participants: list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)
    assigned_labels: list[str] = Field(default_factory=list)


class CompanyConnection(BaseModel):
    """Credentials and codes needed to address one store upstream."""

    company_id: str
    company_code: str
    store_code: str
    base_url: str
    cluster: str | None = None
    username: str
    password_enc: str
