"""Task source factory."""

from __future__ import annotations

from todoist_backup.contracts.config import BackupConfig
from todoist_backup.contracts.source import TaskSource
from todoist_backup.sources.demo import DemoSource
from todoist_backup.sources.todoist.client import TodoistClient


def create_source(config: BackupConfig, token: str | None) -> TaskSource:
    if config.source == "demo":
        return DemoSource()
    return TodoistClient(
        token,
        rest_base_url=config.todoist_rest_url,
        sync_base_url=config.todoist_sync_url,
        comment_retry_limit=config.comment_retry_limit,
    )
