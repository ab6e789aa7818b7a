"""Normalize remote Todoist payloads into canonical tasks.

Remote data is untrusted: records that fail validation or carry no identity
are dropped here and never reach the builder or the reconciler.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from todoist_backup.contracts.task import (
    CanonicalTask,
    RawComment,
    RawCompletedItem,
    RawLabel,
    RawProject,
    RawTask,
    TaskComment,
    TaskId,
    TaskStatus,
)
from todoist_backup.dates import due_timestamp, format_due
from todoist_backup.text import safe_text

logger = logging.getLogger(__name__)


def _validate(model: type[Any], record: object) -> Any | None:
    if not isinstance(record, Mapping):
        return None
    try:
        return model.model_validate(record)
    except ValidationError as exc:
        logger.debug("dropping malformed %s record: %s", model.__name__, exc.error_count())
        return None


def _labels(labels: list[TaskId] | None, label_ids: list[TaskId] | None) -> list[str]:
    values = labels if labels is not None else label_ids
    return [str(value) for value in values or []]


def _optional_id(value: TaskId | None) -> str | None:
    return None if value is None else str(value)


def normalize_active(record: object) -> CanonicalTask | None:
    raw: RawTask | None = _validate(RawTask, record)
    if raw is None or raw.id is None:
        return None
    return CanonicalTask(
        id=str(raw.id),
        content=raw.content or "",
        description=raw.description,
        project_id=_optional_id(raw.project_id),
        labels=_labels(raw.labels, raw.label_ids),
        due=raw.due,
        url=raw.url,
        status=TaskStatus.ACTIVE,
    )


def normalize_completed(record: object) -> CanonicalTask | None:
    """Normalize a completed item; the nested ``task`` wins over flat fields."""
    item: RawCompletedItem | None = _validate(RawCompletedItem, record)
    if item is None:
        return None
    source = item.task or RawTask()
    task_id = source.id if source.id is not None else item.task_id
    if task_id is None:
        return None

    return CanonicalTask(
        id=str(task_id),
        content=source.content if source.content is not None else (item.content or ""),
        description=source.description if source.description is not None else item.description,
        project_id=_optional_id(source.project_id if source.project_id is not None else item.project_id),
        labels=_labels(
            source.labels if source.labels is not None else item.labels,
            source.label_ids if source.label_ids is not None else item.label_ids,
        ),
        due=source.due,
        url=source.url,
        status=TaskStatus.COMPLETED,
        completed_at=item.completed_at,
        completed_date=item.completed_date,
    )


def normalize_comment(record: object, fallback_task_id: str) -> TaskComment | None:
    raw: RawComment | None = _validate(RawComment, record)
    if raw is None or raw.id is None:
        return None
    task_id = raw.task_id if raw.task_id is not None else fallback_task_id
    return TaskComment(
        id=str(raw.id),
        task_id=str(task_id),
        text=safe_text(raw.content),
        posted_at=raw.posted_at,
    )


def merge_tasks(active: Iterable[CanonicalTask], completed: Iterable[CanonicalTask]) -> list[CanonicalTask]:
    """Merge both listings into one collection keyed by task id.

    Completed records go in first; active records overwrite them because the
    two endpoints are mutually exclusive at fetch time.
    """
    merged: dict[str, CanonicalTask] = {}

    for task in completed:
        merged[task.id] = task.model_copy(
            update={"status": TaskStatus.COMPLETED, "fallback_due": format_due(task.due) or None}
        )

    for task in active:
        merged[task.id] = task.model_copy(
            update={
                "status": TaskStatus.ACTIVE,
                "completed_at": None,
                "completed_date": None,
                "fallback_due": format_due(task.due) or None,
            }
        )

    return list(merged.values())


def normalize(active_raw: Iterable[object], completed_raw: Iterable[object]) -> list[CanonicalTask]:
    active = [task for task in (normalize_active(record) for record in active_raw) if task is not None]
    completed = [task for task in (normalize_completed(record) for record in completed_raw) if task is not None]
    return merge_tasks(active, completed)


def attach_comments(
    tasks: Iterable[CanonicalTask], comments_by_task: Mapping[str, list[TaskComment]]
) -> list[CanonicalTask]:
    return [task.model_copy(update={"comments": list(comments_by_task.get(task.id, []))}) for task in tasks]


def sort_tasks(tasks: Iterable[CanonicalTask]) -> list[CanonicalTask]:
    """Active before completed, then by due time, then by title."""
    return sorted(
        tasks,
        key=lambda task: (task.is_completed, due_timestamp(task.due), safe_text(task.content).casefold()),
    )


def build_name_map(projects: Iterable[object]) -> dict[str, str]:
    names: dict[str, str] = {}
    for record in projects:
        project: RawProject | None = _validate(RawProject, record)
        if project is None or project.id is None or project.name is None:
            continue
        names[str(project.id)] = project.name
    return names


def build_label_map(labels: Iterable[object]) -> dict[str, str]:
    """Lookup from label id *and* label name to the label name."""
    names: dict[str, str] = {}
    for record in labels:
        label: RawLabel | None = _validate(RawLabel, record)
        if label is None or label.name is None:
            continue
        if label.id is not None:
            names[str(label.id)] = label.name
        names[label.name] = label.name
    return names
