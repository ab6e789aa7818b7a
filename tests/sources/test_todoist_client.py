"""Tests for the Todoist HTTP source."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx
import pytest

from todoist_backup.contracts.exceptions import SourceError
from todoist_backup.sources.todoist.client import TodoistClient, extract_items, get_cursor

REST = "https://todoist.test/api/v1"
SYNC = "https://todoist.test/sync/v9"

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler, token: str | None = "tok", **kwargs: object) -> TodoistClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TodoistClient(token, rest_base_url=REST, sync_base_url=SYNC, http_client=http_client, **kwargs)


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ([1, 2], [1, 2]),
        ({"results": [1]}, [1]),
        ({"data": "x", "items": [2]}, [2]),
        ({"next_cursor": "c"}, []),
        ("junk", []),
    ],
)
def test_extract_items(body: object, expected: list[object]) -> None:
    assert extract_items(body) == expected


def test_get_cursor() -> None:
    assert get_cursor({"next_cursor": "abc"}) == "abc"
    assert get_cursor({"next_cursor": ""}) is None
    assert get_cursor({"next_cursor": 5}) is None
    assert get_cursor([]) is None


@pytest.mark.asyncio
async def test_active_tasks_follow_cursor() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.params.get("cursor") == "c2":
            return httpx.Response(200, json={"results": [{"id": 2}], "next_cursor": None})
        return httpx.Response(200, json={"results": [{"id": 1}], "next_cursor": "c2"})

    async with _client(handler) as client:
        tasks = await client.fetch_active_tasks()

    assert tasks == [{"id": 1}, {"id": 2}]
    assert [request.url.path for request in seen] == ["/api/v1/tasks", "/api/v1/tasks"]
    assert seen[0].headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_projects_and_labels_accept_bare_lists() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/projects"):
            return httpx.Response(200, json=[{"id": "p1", "name": "Work"}])
        return httpx.Response(200, json={"results": [{"id": "l1", "name": "home"}]})

    async with _client(handler) as client:
        projects = await client.fetch_projects()
        labels = await client.fetch_labels()

    assert projects == [{"id": "p1", "name": "Work"}]
    assert labels == [{"id": "l1", "name": "home"}]


@pytest.mark.asyncio
async def test_completed_tasks_use_offset_pages() -> None:
    pages = {"0": [{"task_id": "a"}, {"task_id": "b"}], "2": [{"task_id": "c"}]}
    seen: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        seen.append(params)
        assert request.url.path == "/sync/v9/completed/get_all"
        return httpx.Response(200, json={"items": pages[params["offset"]]})

    async with _client(handler, page_size=2) as client:
        items = await client.fetch_completed_tasks()

    assert [item["task_id"] for item in items] == ["a", "b", "c"]
    assert seen == [{"limit": "2", "offset": "0"}, {"limit": "2", "offset": "2"}]


@pytest.mark.asyncio
async def test_requests_without_token_omit_authorization() -> None:
    headers: list[httpx.Headers] = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers)
        return httpx.Response(200, json=[])

    async with _client(handler, token=None) as client:
        await client.fetch_labels()

    assert "Authorization" not in headers[0]


@pytest.mark.asyncio
async def test_non_success_status_raises_source_error() -> None:
    async with _client(lambda _request: httpx.Response(401)) as client:
        with pytest.raises(SourceError, match="Error 401 while fetching /tasks") as exc_info:
            await client.fetch_active_tasks()

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_transport_error_raises_source_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    async with _client(handler) as client:
        with pytest.raises(SourceError, match="Request failed while fetching completed tasks"):
            await client.fetch_completed_tasks()


@pytest.mark.asyncio
async def test_invalid_json_raises_source_error() -> None:
    async with _client(lambda _request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(SourceError, match="Invalid JSON"):
            await client.fetch_projects()


@pytest.mark.asyncio
async def test_fetch_before_enter_raises() -> None:
    client = TodoistClient("tok")

    with pytest.raises(SourceError, match="not open"):
        await client.fetch_labels()


@pytest.mark.asyncio
async def test_comments_retry_then_skip(caplog: pytest.LogCaptureFixture) -> None:
    attempts: dict[str, int] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        task_id = request.url.params["task_id"]
        attempts[task_id] = attempts.get(task_id, 0) + 1
        if task_id == "3" or (task_id == "2" and attempts[task_id] == 1):
            return httpx.Response(503)
        return httpx.Response(
            200,
            json={"results": [{"id": f"c{task_id}", "content": "note", "posted_at": "2025-01-02T00:00:00Z"}]},
        )

    with caplog.at_level(logging.ERROR, logger="todoist_backup.sources.todoist.client"):
        async with _client(handler, comment_retry_limit=1) as client:
            comments = await client.fetch_comments(["1", "1", "2", "3"])

    assert set(comments) == {"1", "2"}
    assert comments["1"][0].id == "c1"
    assert comments["1"][0].task_id == "1"
    assert attempts == {"1": 1, "2": 2, "3": 2}
    assert "failed to fetch comments for task 3" in caplog.text


@pytest.mark.asyncio
async def test_comments_without_tasks_make_no_requests() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        assert await client.fetch_comments([]) == {}

    assert calls == []


@pytest.mark.asyncio
async def test_injected_client_is_left_open() -> None:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda _request: httpx.Response(200, json=[])))

    async with TodoistClient("tok", http_client=http_client):
        pass

    assert not http_client.is_closed
    await http_client.aclose()


@pytest.mark.asyncio
async def test_owned_client_is_closed_on_exit() -> None:
    client = TodoistClient("tok")

    async with client:
        assert client._client is not None

    assert client._client is None
