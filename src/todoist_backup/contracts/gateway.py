"""Destination document store contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from todoist_backup.contracts.blocks import BlockOrder, ExistingBlock


class BlockGateway(ABC):
    """Page/block primitives of the destination.

    Each primitive is individually atomic; callers never assume transactional
    semantics across calls.
    """

    @abstractmethod
    async def __aenter__(self) -> BlockGateway: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def find_page(self, title: str) -> str | None: ...  # pragma: no cover

    @abstractmethod
    async def create_page(self, title: str) -> str: ...  # pragma: no cover

    @abstractmethod
    async def list_pages(self, prefix: str) -> list[str]: ...  # pragma: no cover

    @abstractmethod
    async def get_tree(self, uid: str) -> list[ExistingBlock]: ...  # pragma: no cover

    @abstractmethod
    async def create_block(self, parent_uid: str, text: str, order: BlockOrder = "last") -> str: ...  # pragma: no cover

    @abstractmethod
    async def update_block(self, uid: str, text: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def delete_block(self, uid: str) -> None: ...  # pragma: no cover
