"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, ValidationInfo, field_validator

DEFAULT_PAGE_PREFIX = "todoist"
DEFAULT_STATUS_ALIAS_ACTIVE = "◼️"
DEFAULT_STATUS_ALIAS_COMPLETED = "✅"
DEFAULT_STATUS_ALIAS_DELETED = "❌"
MIN_INTERVAL_MINUTES = 1


class StatusAliases(BaseModel):
    active: str = DEFAULT_STATUS_ALIAS_ACTIVE
    completed: str = DEFAULT_STATUS_ALIAS_COMPLETED
    deleted: str = DEFAULT_STATUS_ALIAS_DELETED

    model_config = {"frozen": True}

    @field_validator("active", "completed", "deleted", mode="before")
    @classmethod
    def _blank_alias_uses_default(cls, value: object, info: ValidationInfo) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value.strip() if isinstance(value, str) else value


class BackupConfig(BaseModel):
    """Read-only snapshot of everything a sync run needs.

    Attributes:
        source: ``todoist`` reads the Todoist API; ``demo`` serves a fixed
            offline data set and needs no Todoist token.
        todoist_token: Todoist API token. Requests omit the auth header when unset.
        roam_graph: Name of the destination Roam graph.
        roam_token: Roam backend API token.
        page_prefix: Prefix of every destination page (``<prefix>/...``).
        page_mode: ``task`` puts each task on ``<prefix>/<id>``; ``date`` buckets
            tasks by their primary date.
        interval_minutes: Minutes between automatic runs, never below one.
        include_comments: Fetch and mirror task comments.
        exclude_title_patterns: Title patterns, plain or ``/body/flags``.
        exclude_patterns_file: Extra patterns, one per line; relative paths are
            resolved against the config file directory.
        verbose: Enable debug logging.
        status_aliases: Display values for the three task statuses.
        mutation_delay_ms: Pause after every destination mutation.
        yield_every: Mutations between cooperative event-loop yields.
        comment_retry_limit: Extra attempts per task when fetching comments.
    """

    source: Literal["todoist", "demo"] = "todoist"
    todoist_token: SecretStr | None = None
    roam_graph: str
    roam_token: SecretStr | None = None
    page_prefix: str = DEFAULT_PAGE_PREFIX
    page_mode: Literal["task", "date"] = "task"
    interval_minutes: int = 5
    include_comments: bool = False
    exclude_title_patterns: list[str] = Field(default_factory=list)
    exclude_patterns_file: Path | None = None
    verbose: bool = False
    status_aliases: StatusAliases = Field(default_factory=StatusAliases)
    mutation_delay_ms: int = Field(default=100, ge=0)
    yield_every: int = Field(default=25, ge=1)
    comment_retry_limit: int = Field(default=1, ge=0)
    todoist_rest_url: str = "https://api.todoist.com/api/v1"
    todoist_sync_url: str = "https://api.todoist.com/sync/v9"
    roam_api_url: str = "https://api.roamresearch.com/api/graph"

    model_config = {"frozen": True}

    @field_validator("todoist_token", "roam_token", mode="before")
    @classmethod
    def _blank_token_is_unset(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @field_validator("page_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: object) -> object:
        if value is None:
            return DEFAULT_PAGE_PREFIX
        if isinstance(value, str):
            return value.strip().rstrip("/") or DEFAULT_PAGE_PREFIX
        return value

    @field_validator("interval_minutes", mode="after")
    @classmethod
    def _clamp_interval(cls, value: int) -> int:
        return max(value, MIN_INTERVAL_MINUTES)

    @field_validator("exclude_title_patterns", mode="before")
    @classmethod
    def _split_patterns(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return value.splitlines()
        return value

    @property
    def interval_seconds(self) -> float:
        return float(self.interval_minutes * 60)
