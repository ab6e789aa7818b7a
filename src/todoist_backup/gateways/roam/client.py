"""Roam backend API gateway.

Reads use the Datalog endpoints (``/q`` and ``/pull``); writes go through
``/write`` one action at a time. The API answers the first request with a
redirect to the graph's peer host; the peer URL is remembered and the
``Authorization`` header is re-sent to it.
"""

from __future__ import annotations

import logging
import random
import string
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from todoist_backup.contracts.blocks import BlockOrder, ExistingBlock
from todoist_backup.contracts.exceptions import GatewayError
from todoist_backup.contracts.gateway import BlockGateway
from todoist_backup.gateways.roam._retrying_transport import RetryingTransport

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.roamresearch.com/api/graph"

_UID_ALPHABET = string.ascii_letters + string.digits + "-_"
_REDIRECT_CODES = frozenset({301, 302, 303, 307, 308})
_MAX_REDIRECTS = 3

FIND_PAGE_QUERY = "[:find ?uid . :in $ ?title :where [?p :node/title ?title] [?p :block/uid ?uid]]"
LIST_PAGES_QUERY = (
    "[:find ?title :in $ ?prefix :where [?p :node/title ?title] [(clojure.string/starts-with? ?title ?prefix)]]"
)
TREE_SELECTOR = "[:block/uid :block/string :block/order {:block/children ...}]"


def generate_uid() -> str:
    return "".join(random.choices(_UID_ALPHABET, k=9))


def _field(node: Mapping[str, Any], name: str) -> Any:
    """Roam returns keys with or without the leading ``:``."""
    if name in node:
        return node[name]
    return node.get(f":{name}")


def parse_block(node: Mapping[str, Any]) -> ExistingBlock | None:
    uid = _field(node, "block/uid")
    if not isinstance(uid, str) or not uid:
        return None
    text = _field(node, "block/string")
    order = _field(node, "block/order")
    return ExistingBlock(
        uid=uid,
        text=text if isinstance(text, str) else "",
        order=order if isinstance(order, int) else 0,
        children=parse_children(node),
    )


def parse_children(node: Mapping[str, Any]) -> list[ExistingBlock]:
    raw_children = _field(node, "block/children")
    if not isinstance(raw_children, list):
        return []
    children = [parse_block(child) for child in raw_children if isinstance(child, Mapping)]
    return sorted((child for child in children if child is not None), key=lambda child: child.order)


class RoamGateway(BlockGateway):
    def __init__(
        self,
        graph: str,
        token: str,
        *,
        base_url: str = DEFAULT_API_URL,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._graph = graph
        self._token = token
        self._graph_url = f"{base_url.rstrip('/')}/{graph}"
        self._max_retries = max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> RoamGateway:
        self._client = httpx.AsyncClient(
            transport=RetryingTransport(transport=self._transport, max_retries=self._max_retries),
            headers={
                "Authorization": f"Bearer {self._token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(30.0),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def find_page(self, title: str) -> str | None:
        result = await self._query(FIND_PAGE_QUERY, [title], operation="find_page")
        return result if isinstance(result, str) and result else None

    async def create_page(self, title: str) -> str:
        uid = generate_uid()
        await self._write({"action": "create-page", "page": {"title": title, "uid": uid}}, operation="create_page")
        return uid

    async def list_pages(self, prefix: str) -> list[str]:
        result = await self._query(LIST_PAGES_QUERY, [prefix], operation="list_pages")
        titles: list[str] = []
        for row in result if isinstance(result, list) else []:
            title = row[0] if isinstance(row, list) and row else row
            if isinstance(title, str):
                titles.append(title)
        return titles

    async def get_tree(self, uid: str) -> list[ExistingBlock]:
        body = await self._post(
            "pull",
            {"eid": f'[:block/uid "{uid}"]', "selector": TREE_SELECTOR},
            operation="get_tree",
        )
        result = body.get("result") if isinstance(body, Mapping) else None
        if not isinstance(result, Mapping):
            return []
        return parse_children(result)

    async def create_block(self, parent_uid: str, text: str, order: BlockOrder = "last") -> str:
        uid = generate_uid()
        await self._write(
            {
                "action": "create-block",
                "location": {"parent-uid": parent_uid, "order": order},
                "block": {"string": text, "uid": uid},
            },
            operation="create_block",
        )
        return uid

    async def update_block(self, uid: str, text: str) -> None:
        await self._write({"action": "update-block", "block": {"uid": uid, "string": text}}, operation="update_block")

    async def delete_block(self, uid: str) -> None:
        await self._write({"action": "delete-block", "block": {"uid": uid}}, operation="delete_block")

    async def _query(self, query: str, args: list[Any], *, operation: str) -> Any:
        body = await self._post("q", {"query": query, "args": args}, operation=operation)
        return body.get("result") if isinstance(body, Mapping) else None

    async def _write(self, action: dict[str, Any], *, operation: str) -> None:
        await self._post("write", action, operation=operation, expect_json=False)

    async def _post(self, endpoint: str, payload: dict[str, Any], *, operation: str, expect_json: bool = True) -> Any:
        if self._client is None:
            raise GatewayError("Roam gateway is not open; use 'async with'", operation=operation)

        url = f"{self._graph_url}/{endpoint}"
        try:
            response = await self._client.post(url, json=payload)
            for _ in range(_MAX_REDIRECTS):
                if response.status_code not in _REDIRECT_CODES or "Location" not in response.headers:
                    break
                self._follow_peer(response.headers["Location"], endpoint)
                url = f"{self._graph_url}/{endpoint}"
                response = await self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise GatewayError(f"Roam {operation} failed: {exc}", operation=operation) from exc

        if not response.is_success:
            raise GatewayError(
                f"Roam {operation} failed with HTTP {response.status_code}: {response.text[:200]}",
                operation=operation,
            )
        if not expect_json or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Roam {operation} returned invalid JSON", operation=operation) from exc

    def _follow_peer(self, location: str, endpoint: str) -> None:
        suffix = f"/{endpoint}"
        peer = location[: -len(suffix)] if location.endswith(suffix) else location.rstrip("/")
        if peer != self._graph_url:
            logger.debug("roam graph %s redirected to %s", self._graph, peer)
            self._graph_url = peer
