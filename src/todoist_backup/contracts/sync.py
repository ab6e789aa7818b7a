"""Sync result contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ReconcileResult(BaseModel):
    """Mutation counters for one reconciliation pass."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    retained: int = 0
    duplicates_removed: int = 0
    placeholders_removed: int = 0
    skipped_roots: int = 0
    pages_created: int = 0
    locations: list[str] = Field(default_factory=list)
    cleaned_locations: list[str] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def mutations(self) -> int:
        return self.created + self.updated + self.deleted + self.pages_created


class SyncStatus(StrEnum):
    COMPLETED = "completed"
    REJECTED = "rejected"
    SKIPPED = "skipped"


class SyncOutcome(BaseModel):
    """What happened to one sync trigger."""

    status: SyncStatus
    trigger: str
    message: str = ""
    active_tasks: int = 0
    completed_tasks: int = 0
    excluded_tasks: int = 0
    synced_tasks: int = 0
    result: ReconcileResult | None = None
