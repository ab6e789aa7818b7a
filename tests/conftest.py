"""Shared test fixtures for todoist-backup tests."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator

import pytest

from todoist_backup.contracts.config import BackupConfig, StatusAliases
from todoist_backup.contracts.task import CanonicalTask, TaskDue, TaskStatus


@pytest.fixture
def set_tz(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[str], None]]:
    """Switch the process timezone; restored after the test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")

    def _set(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def utc_tz(set_tz: Callable[[str], None]) -> None:
    set_tz("UTC")


@pytest.fixture
def aliases() -> StatusAliases:
    return StatusAliases()


@pytest.fixture
def base_config() -> BackupConfig:
    return BackupConfig(
        todoist_token="todoist-token",
        roam_graph="graph",
        roam_token="roam-token",
        mutation_delay_ms=0,
    )


@pytest.fixture
def active_task() -> CanonicalTask:
    return CanonicalTask(
        id="123",
        content="Buy milk",
        project_id="p1",
        labels=["l1"],
        due=TaskDue(date="2025-01-02"),
        status=TaskStatus.ACTIVE,
        fallback_due="January 2nd, 2025",
    )
