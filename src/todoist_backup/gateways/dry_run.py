"""Dry-run gateway: real reads, recorded writes."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

from todoist_backup.contracts.blocks import BlockOrder, ExistingBlock
from todoist_backup.contracts.gateway import BlockGateway


@dataclass(frozen=True)
class RecordedWrite:
    operation: str
    target: str
    text: str | None = None


class DryRunGateway(BlockGateway):
    """Wrap another gateway so a run can be previewed without mutating anything.

    Reads go to *inner* (or see an empty graph when there is none). Writes
    are recorded in :attr:`writes` and return deterministic placeholder uids;
    pages that would be created read back as empty.
    """

    def __init__(self, inner: BlockGateway | None = None) -> None:
        self._inner = inner
        self._counter = 0
        self._pages: dict[str, str] = {}
        self.writes: list[RecordedWrite] = []

    async def __aenter__(self) -> DryRunGateway:
        if self._inner is not None:
            await self._inner.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._inner is not None:
            await self._inner.__aexit__(exc_type, exc_val, exc_tb)

    def _placeholder_uid(self, kind: str) -> str:
        self._counter += 1
        return f"dry-run-{kind}-{self._counter}"

    async def find_page(self, title: str) -> str | None:
        if title in self._pages:
            return self._pages[title]
        if self._inner is None:
            return None
        return await self._inner.find_page(title)

    async def create_page(self, title: str) -> str:
        uid = self._placeholder_uid("page")
        self._pages[title] = uid
        self.writes.append(RecordedWrite("create_page", title))
        return uid

    async def list_pages(self, prefix: str) -> list[str]:
        if self._inner is None:
            return []
        return await self._inner.list_pages(prefix)

    async def get_tree(self, uid: str) -> list[ExistingBlock]:
        if self._inner is None or uid.startswith("dry-run-"):
            return []
        return await self._inner.get_tree(uid)

    async def create_block(self, parent_uid: str, text: str, order: BlockOrder = "last") -> str:
        self.writes.append(RecordedWrite("create_block", parent_uid, text))
        return self._placeholder_uid("block")

    async def update_block(self, uid: str, text: str) -> None:
        self.writes.append(RecordedWrite("update_block", uid, text))

    async def delete_block(self, uid: str) -> None:
        self.writes.append(RecordedWrite("delete_block", uid))
