"""Task contracts: remote payload shapes and the canonical task."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

TaskId = str | int


class TaskStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DELETED = "deleted"


class _RemotePayload(BaseModel):
    """Base for untrusted remote records: every field optional, extras ignored."""

    model_config = ConfigDict(extra="ignore")


class TaskDue(_RemotePayload):
    string: str | None = None
    date: str | None = None
    datetime: str | None = None
    timezone: str | None = None


class RawTask(_RemotePayload):
    id: TaskId | None = None
    content: str | None = None
    description: str | None = None
    project_id: TaskId | None = None
    labels: list[TaskId] | None = None
    label_ids: list[TaskId] | None = None
    due: TaskDue | None = None
    url: str | None = None


class RawCompletedItem(_RemotePayload):
    task_id: TaskId | None = None
    content: str | None = None
    description: str | None = None
    project_id: TaskId | None = None
    labels: list[TaskId] | None = None
    label_ids: list[TaskId] | None = None
    completed_at: str | None = None
    completed_date: str | None = None
    task: RawTask | None = None


class RawComment(_RemotePayload):
    id: TaskId | None = None
    task_id: TaskId | None = None
    content: str | None = None
    posted_at: str | None = None


class RawProject(_RemotePayload):
    id: TaskId | None = None
    name: str | None = None


class RawLabel(_RemotePayload):
    id: TaskId | None = None
    name: str | None = None


class TaskComment(BaseModel):
    id: str
    task_id: str
    text: str = ""
    posted_at: str | None = None


class CanonicalTask(BaseModel):
    """Unified task record after merging the active and completed listings.

    ``comments`` is ``None`` when comment enrichment was not requested for the
    run, and a (possibly empty) list otherwise.
    """

    id: str
    content: str = ""
    description: str | None = None
    project_id: str | None = None
    labels: list[str] = Field(default_factory=list)
    due: TaskDue | None = None
    url: str | None = None
    status: TaskStatus = TaskStatus.ACTIVE
    completed_at: str | None = None
    completed_date: str | None = None
    fallback_due: str | None = None
    comments: list[TaskComment] | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def canonical_url(self) -> str:
        return self.url or f"https://todoist.com/showTask?id={self.id}"
