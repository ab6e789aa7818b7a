"""Remote task source contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from types import TracebackType
from typing import Any

from todoist_backup.contracts.task import TaskComment

RawRecord = dict[str, Any]


class TaskSource(ABC):
    """Read-only view of the remote task system.

    Listing methods return raw records; validation happens in
    :mod:`todoist_backup.normalize`.
    """

    @abstractmethod
    async def __aenter__(self) -> TaskSource: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def fetch_active_tasks(self) -> list[RawRecord]: ...  # pragma: no cover

    @abstractmethod
    async def fetch_completed_tasks(self) -> list[RawRecord]: ...  # pragma: no cover

    @abstractmethod
    async def fetch_projects(self) -> list[RawRecord]: ...  # pragma: no cover

    @abstractmethod
    async def fetch_labels(self) -> list[RawRecord]: ...  # pragma: no cover

    @abstractmethod
    async def fetch_comments(self, task_ids: Iterable[str]) -> dict[str, list[TaskComment]]: ...  # pragma: no cover
