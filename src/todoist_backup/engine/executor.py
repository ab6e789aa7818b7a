"""Sequential, rate-limited application of mutation intents."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from todoist_backup.contracts.blocks import BlockNode, BlockOrder, CreateBlock, DeleteBlock, MutationIntent, UpdateBlock
from todoist_backup.contracts.exceptions import GatewayError, SyncError
from todoist_backup.contracts.gateway import BlockGateway

logger = logging.getLogger(__name__)


class MutationExecutor:
    """Apply intents one at a time, never concurrently.

    Every primitive call is followed by ``delay_seconds`` of sleep. With a zero
    delay the executor still yields to the event loop every ``yield_every``
    calls so long runs do not starve other tasks.
    """

    def __init__(
        self,
        gateway: BlockGateway,
        *,
        delay_seconds: float = 0.1,
        yield_every: int = 25,
    ) -> None:
        self._gateway = gateway
        self._delay = max(0.0, delay_seconds)
        self._yield_every = max(1, yield_every)
        self.calls = 0
        self.created = 0
        self.updated = 0
        self.deleted = 0
        self.pages_created = 0

    async def ensure_page(self, title: str) -> tuple[str, bool]:
        """Return ``(uid, created)`` for the page titled *title*."""
        uid = await self._gateway.find_page(title)
        if uid:
            return uid, False
        uid = await self._gateway.create_page(title)
        self.pages_created += 1
        await self._pace()
        logger.debug("created page %s (%s)", title, uid)
        return uid, True

    async def execute(self, intents: Iterable[MutationIntent]) -> None:
        for intent in intents:
            if isinstance(intent, CreateBlock):
                await self._create_root(intent)
            elif isinstance(intent, UpdateBlock):
                await self._gateway.update_block(intent.uid, intent.text)
                await self._pace()
                self.updated += 1
            elif isinstance(intent, DeleteBlock):
                await self._gateway.delete_block(intent.uid)
                await self._pace()
                self.deleted += 1
            else:  # pragma: no cover
                raise TypeError(f"unknown mutation intent: {intent!r}")

    async def _create_root(self, intent: CreateBlock) -> None:
        uid = await self._gateway.create_block(intent.parent_uid, intent.node.text, intent.order)
        await self._pace()
        self.created += 1
        try:
            for child in intent.node.children:
                await self._create_subtree(uid, child, "last")
        except GatewayError as exc:
            label = intent.identity or intent.node.text
            raise SyncError(f"Partial create failure for {label}: block {uid} is missing children: {exc}") from exc

    async def _create_subtree(self, parent_uid: str, node: BlockNode, order: BlockOrder) -> str:
        uid = await self._gateway.create_block(parent_uid, node.text, order)
        await self._pace()
        for child in node.children:
            await self._create_subtree(uid, child, "last")
        return uid

    async def _pace(self) -> None:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        elif self.calls % self._yield_every == 0:
            await asyncio.sleep(0)
