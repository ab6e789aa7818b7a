"""Block tree contracts shared by the builder, planner and gateways."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BlockOrder = int | Literal["last"]


class BlockNode(BaseModel):
    """Desired block: text plus ordered children. Never persisted."""

    model_config = ConfigDict(frozen=True)

    text: str
    children: tuple[BlockNode, ...] = ()


class ExistingBlock(BaseModel):
    """Block as currently stored in the destination."""

    uid: str
    text: str = ""
    order: int = 0
    children: list[ExistingBlock] = Field(default_factory=list)


class CreateBlock(BaseModel):
    """Create ``node`` (and its whole subtree) under ``parent_uid``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["create"] = "create"
    parent_uid: str
    node: BlockNode
    order: BlockOrder = "last"
    identity: str | None = None


class UpdateBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["update"] = "update"
    uid: str
    text: str
    identity: str | None = None


class DeleteBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["delete"] = "delete"
    uid: str
    identity: str | None = None
    reason: Literal["obsolete", "duplicate", "placeholder", "comments"] = "obsolete"


MutationIntent = CreateBlock | UpdateBlock | DeleteBlock
