"""Todoist HTTP source.

Active tasks, projects, labels and comments come from the REST API with
cursor pagination; completed tasks come from the sync API with offset
pagination. Payloads are returned raw and validated by the normalizer.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from types import TracebackType
from typing import Any

import httpx

from todoist_backup.contracts.exceptions import SourceError
from todoist_backup.contracts.source import RawRecord, TaskSource
from todoist_backup.contracts.task import TaskComment
from todoist_backup.normalize import normalize_comment

logger = logging.getLogger(__name__)

DEFAULT_REST_URL = "https://api.todoist.com/api/v1"
DEFAULT_SYNC_URL = "https://api.todoist.com/sync/v9"
COMPLETED_PAGE_SIZE = 200

_ITEM_KEYS = ("data", "items", "tasks", "projects", "labels", "results")


def extract_items(body: Any) -> list[Any]:
    """Records from a bare list or from the first list-valued known key."""
    if isinstance(body, list):
        return body
    if isinstance(body, Mapping):
        for key in _ITEM_KEYS:
            candidate = body.get(key)
            if isinstance(candidate, list):
                return candidate
    return []


def get_cursor(body: Any) -> str | None:
    if not isinstance(body, Mapping):
        return None
    value = body.get("next_cursor")
    return value if isinstance(value, str) and value else None


class TodoistClient(TaskSource):
    """Read-only Todoist adapter over ``httpx.AsyncClient``.

    Any non-2xx response or transport failure raises :class:`SourceError`,
    except for comment fetches, which re-queue a failed task up to
    ``comment_retry_limit`` extra times and then skip it.
    """

    def __init__(
        self,
        token: str | None,
        *,
        rest_base_url: str = DEFAULT_REST_URL,
        sync_base_url: str = DEFAULT_SYNC_URL,
        page_size: int = COMPLETED_PAGE_SIZE,
        comment_retry_limit: int = 1,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._rest_base_url = rest_base_url.rstrip("/")
        self._sync_base_url = sync_base_url.rstrip("/")
        self._page_size = max(1, page_size)
        self._comment_retry_limit = max(0, comment_retry_limit)
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> TodoistClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._headers(),
                timeout=httpx.Timeout(30.0),
            )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def fetch_active_tasks(self) -> list[RawRecord]:
        return await self.fetch_paginated("/tasks")

    async def fetch_projects(self) -> list[RawRecord]:
        return await self.fetch_paginated("/projects")

    async def fetch_labels(self) -> list[RawRecord]:
        return await self.fetch_paginated("/labels")

    async def fetch_completed_tasks(self) -> list[RawRecord]:
        items: list[RawRecord] = []
        offset = 0
        while True:
            body = await self._get_json(
                f"{self._sync_base_url}/completed/get_all",
                params={"limit": str(self._page_size), "offset": str(offset)},
                what="completed tasks",
            )
            batch = body.get("items") if isinstance(body, Mapping) else None
            batch = batch if isinstance(batch, list) else []
            items.extend(batch)
            logger.debug("fetch_completed_batch: %d items at offset %d (total %d)", len(batch), offset, len(items))
            if len(batch) < self._page_size:
                return items
            offset += self._page_size

    async def fetch_paginated(self, path: str, params: Mapping[str, str] | None = None) -> list[RawRecord]:
        """Follow ``next_cursor`` until the listing is exhausted."""
        items: list[RawRecord] = []
        cursor: str | None = None
        while True:
            query = dict(params or {})
            if cursor:
                query["cursor"] = cursor
            body = await self._get_json(f"{self._rest_base_url}{path}", params=query, what=path)
            batch = extract_items(body)
            items.extend(batch)
            cursor = get_cursor(body)
            logger.debug(
                "fetch_paginated_batch: %s %d items (total %d, more=%s)", path, len(batch), len(items), bool(cursor)
            )
            if not cursor:
                return items

    async def fetch_comments(self, task_ids: Iterable[str]) -> dict[str, list[TaskComment]]:
        unique_ids = list(dict.fromkeys(str(task_id) for task_id in task_ids))
        comments: dict[str, list[TaskComment]] = {}
        if not unique_ids:
            return comments

        logger.debug("fetch_comments_start: %d tasks", len(unique_ids))
        queue = deque(unique_ids)
        attempts: dict[str, int] = {}
        while queue:
            task_id = queue.popleft()
            try:
                records = await self.fetch_paginated("/comments", {"task_id": task_id})
            except SourceError as exc:
                attempts[task_id] = attempts.get(task_id, 0) + 1
                if attempts[task_id] <= self._comment_retry_limit:
                    queue.append(task_id)
                else:
                    logger.error("failed to fetch comments for task %s: %s", task_id, exc)
                continue
            parsed = (normalize_comment(record, task_id) for record in records)
            comments[task_id] = [comment for comment in parsed if comment is not None]

        logger.debug(
            "fetch_comments_completed: %d tasks, %d comments",
            len(comments),
            sum(len(values) for values in comments.values()),
        )
        return comments

    async def _get_json(self, url: str, *, params: Mapping[str, str], what: str) -> Any:
        if self._client is None:
            raise SourceError("Todoist client is not open; use 'async with'")
        try:
            response = await self._client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            raise SourceError(f"Request failed while fetching {what}: {exc}") from exc
        if not response.is_success:
            raise SourceError(
                f"Error {response.status_code} while fetching {what}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise SourceError(f"Invalid JSON while fetching {what}") from exc
