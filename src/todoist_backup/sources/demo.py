"""Offline task source serving a small fixed data set."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta, timezone
from types import TracebackType

from todoist_backup.contracts.source import RawRecord, TaskSource
from todoist_backup.contracts.task import TaskComment

logger = logging.getLogger(__name__)


class DemoSource(TaskSource):
    """Three open tasks due today and one finished yesterday, across two projects.

    Lets a graph be wired up and the page layout checked without a Todoist
    account. Records use the same raw shapes as the API so they go through
    normalization unchanged. Comments are never served.
    """

    def __init__(self, *, today: Callable[[], date] = date.today) -> None:
        self._today = today

    async def __aenter__(self) -> DemoSource:
        logger.info("using offline demo tasks instead of the Todoist API")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    async def fetch_active_tasks(self) -> list[RawRecord]:
        due = {"date": self._today().isoformat(), "string": "today"}
        return [
            {
                "id": "demo-001",
                "content": "[DEMO] Review documentation",
                "description": "Sample task served by the demo source",
                "project_id": "demo-project-1",
                "labels": ["demo", "testing"],
                "due": due,
            },
            {
                "id": "demo-002",
                "content": "[DEMO] Write unit tests @testing",
                "description": "Inline label in the title",
                "project_id": "demo-project-1",
                "labels": ["development"],
                "due": due,
            },
            {
                "id": "demo-003",
                "content": "[DEMO] Deploy to production",
                "project_id": "demo-project-2",
                "labels": [],
                "due": due,
            },
        ]

    async def fetch_completed_tasks(self) -> list[RawRecord]:
        yesterday = self._today() - timedelta(days=1)
        finished = datetime.combine(yesterday, time(17, 30), tzinfo=timezone.utc)
        return [
            {
                "task_id": "demo-completed-001",
                "content": "[DEMO] Set up project",
                "description": "Finished the day before",
                "project_id": "demo-project-1",
                "labels": ["setup"],
                "completed_at": finished.isoformat().replace("+00:00", "Z"),
                "task": {"id": "demo-completed-001", "due": {"date": yesterday.isoformat(), "string": "yesterday"}},
            }
        ]

    async def fetch_projects(self) -> list[RawRecord]:
        return [
            {"id": "demo-project-1", "name": "DemoProject"},
            {"id": "demo-project-2", "name": "DemoDeploy"},
        ]

    async def fetch_labels(self) -> list[RawRecord]:
        return [{"id": name, "name": name} for name in ("demo", "testing", "development", "setup")]

    async def fetch_comments(self, task_ids: Iterable[str]) -> dict[str, list[TaskComment]]:
        return {}
