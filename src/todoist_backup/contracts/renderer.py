"""Renderer contract."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from todoist_backup.contracts.blocks import BlockNode
from todoist_backup.contracts.config import StatusAliases
from todoist_backup.contracts.task import CanonicalTask


class RenderContext(BaseModel):
    project_names: dict[str, str] = Field(default_factory=dict)
    label_names: dict[str, str] = Field(default_factory=dict)
    status_aliases: StatusAliases = Field(default_factory=StatusAliases)


class TaskRenderer(ABC):
    @abstractmethod
    def render(self, task: CanonicalTask, context: RenderContext) -> BlockNode: ...  # pragma: no cover
