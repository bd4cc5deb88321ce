"""Reconciliation result contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class SyncMode(StrEnum):
    PEOPLE = "people"
    SPACES = "spaces"


class ReconcileStoreResult(BaseModel):
    store_id: str
    store_name: str
    mode: SyncMode = SyncMode.SPACES
    success: bool = True
    pushed: int = 0
    deleted: int = 0
    unchanged: int = 0
    repaired: int = 0
    total_expected: int = 0
    total_in_aims: int = 0
    truncated: bool = False
    error: str | None = None

    @property
    def has_changes(self) -> bool:
        return self.pushed > 0 or self.deleted > 0 or self.repaired > 0
