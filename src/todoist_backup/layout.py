"""Map tasks to destination pages."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from todoist_backup.contracts.blocks import BlockNode
from todoist_backup.contracts.renderer import RenderContext, TaskRenderer
from todoist_backup.contracts.task import CanonicalTask
from todoist_backup.properties import NO_DUE_DATE
from todoist_backup.renderers.roam import resolve_primary_date

PageMode = Literal["task", "date"]


def location_prefix(page_prefix: str) -> str:
    return f"{page_prefix}/"


def resolve_target_location(task: CanonicalTask, page_prefix: str, page_mode: PageMode = "task") -> str:
    """Page a task lives on: a pure function of the task and the configuration.

    ``task`` mode gives every task its own ``<prefix>/<id>`` page; ``date``
    mode buckets tasks by the date shown in their title, so a due-date change
    moves the task to another page.
    """
    if page_mode == "date":
        return f"{location_prefix(page_prefix)}{resolve_primary_date(task) or NO_DUE_DATE}"
    return f"{location_prefix(page_prefix)}{task.id}"


def group_by_location(
    tasks: Iterable[CanonicalTask],
    renderer: TaskRenderer,
    context: RenderContext,
    *,
    page_prefix: str,
    page_mode: PageMode = "task",
) -> dict[str, list[BlockNode]]:
    grouped: dict[str, list[BlockNode]] = {}
    for task in tasks:
        location = resolve_target_location(task, page_prefix, page_mode)
        grouped.setdefault(location, []).append(renderer.render(task, context))
    return grouped
