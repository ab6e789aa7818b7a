"""Roam block renderer.

Builds the desired block tree for one task, independent of what currently
exists in the graph::

    [[January 2nd, 2025]] Buy milk #Inbox
        todoist-id:: [123](https://todoist.com/showTask?id=123)
        todoist-due:: January 2nd, 2025
        todoist-status:: ◼️
        comments...
        todoist-comments:: 2
            [todoist](https://todoist.com/app/task/123/comment/9) first
            todoist-comment-id:: 9
"""

from __future__ import annotations

from todoist_backup.contracts.blocks import BlockNode
from todoist_backup.contracts.config import StatusAliases
from todoist_backup.contracts.renderer import RenderContext, TaskRenderer
from todoist_backup.contracts.task import CanonicalTask, TaskComment, TaskStatus
from todoist_backup.dates import format_display_date, format_due, format_timestamp, timestamp_of
from todoist_backup.properties import (
    COMMENT_ID_PROPERTY,
    COMMENT_POSTED_PROPERTY,
    COMMENTS_HEADER,
    COMMENTS_PROPERTY,
    COMPLETED_PROPERTY,
    DEFAULT_PROJECT,
    DESCRIPTION_PROPERTY,
    DUE_PROPERTY,
    ID_PROPERTY,
    LABELS_PROPERTY,
    NO_DUE_DATE,
    STATUS_PROPERTY,
    UNTITLED_TASK,
)
from todoist_backup.text import convert_inline_mentions, format_label_tag, safe_text, sanitize_link_preserving


def property_line(key: str, value: str) -> str:
    return f"{key}:: {value}"


def resolve_primary_date(task: CanonicalTask) -> str:
    """Date shown in the title link.

    Explicit due, then the due carried over from the merge, then (completed
    tasks only) the completion date. A completed task keeps showing when it
    was due, not when it was done.
    """
    due = format_due(task.due)
    if due:
        return sanitize_link_preserving(due)
    if task.fallback_due:
        return sanitize_link_preserving(task.fallback_due)
    if task.is_completed:
        completed = format_display_date(task.completed_date or task.completed_at)
        if completed:
            return sanitize_link_preserving(completed)
    return ""


def block_title(task: CanonicalTask, project_names: dict[str, str]) -> str:
    primary_date = resolve_primary_date(task) or NO_DUE_DATE
    title = convert_inline_mentions(sanitize_link_preserving(safe_text(task.content) or UNTITLED_TASK))
    project = project_names.get(task.project_id or "", DEFAULT_PROJECT)
    return f"[[{primary_date}]] {title} #{project}"


def resolve_labels(task: CanonicalTask, label_names: dict[str, str]) -> list[str]:
    """Label names by id, then by name, then raw; de-duplicated in first-seen order."""
    names: list[str] = []
    for value in task.labels:
        normalized = safe_text(label_names.get(value, value))
        if normalized and normalized not in names:
            names.append(normalized)
    return names


def resolve_status_alias(status: TaskStatus | str, aliases: StatusAliases) -> str:
    by_status = {
        TaskStatus.ACTIVE.value: aliases.active,
        TaskStatus.COMPLETED.value: aliases.completed,
        TaskStatus.DELETED.value: aliases.deleted,
    }
    return by_status.get(str(status), str(status))


def _completed_value(task: CanonicalTask) -> str:
    raw = task.completed_date or task.completed_at or ""
    formatted = format_display_date(raw)
    if formatted:
        return f"[[{formatted}]]"
    return sanitize_link_preserving(raw) if raw else ""


def _labels_value(labels: list[str]) -> str:
    tags: list[str] = []
    for label in labels:
        tag = format_label_tag(label)
        if not tag:
            continue
        tags.append(tag if tag.startswith("#") else f"#{tag}")
    return " ".join(tags)


def build_property_blocks(
    task: CanonicalTask, label_names: dict[str, str], status_aliases: StatusAliases
) -> list[BlockNode]:
    # todoist-id always comes first: it is how existing blocks are matched.
    lines = [property_line(ID_PROPERTY, f"[{task.id}]({task.canonical_url})")]

    due = format_due(task.due)
    if due:
        lines.append(property_line(DUE_PROPERTY, due))

    description = sanitize_link_preserving(task.description)
    if description:
        lines.append(property_line(DESCRIPTION_PROPERTY, description))

    labels = _labels_value(resolve_labels(task, label_names))
    if labels:
        lines.append(property_line(LABELS_PROPERTY, labels))

    if task.is_completed:
        completed = _completed_value(task)
        if completed:
            lines.append(property_line(COMPLETED_PROPERTY, completed))

    lines.append(property_line(STATUS_PROPERTY, resolve_status_alias(task.status, status_aliases)))
    return [BlockNode(text=line) for line in lines]


def comment_url(task: CanonicalTask, comment: TaskComment) -> str:
    return f"https://todoist.com/app/task/{comment.task_id or task.id}/comment/{comment.id}"


def comment_text(task: CanonicalTask, comment: TaskComment) -> str:
    prefix = f"[todoist]({comment_url(task, comment)})"
    body = sanitize_link_preserving(comment.text)
    lines = [f"{prefix} {body}" if body else prefix, property_line(COMMENT_ID_PROPERTY, comment.id)]
    if comment.posted_at:
        lines.append(property_line(COMMENT_POSTED_PROPERTY, format_timestamp(comment.posted_at)))
    return "\n".join(lines)


def sort_comments(comments: list[TaskComment]) -> list[TaskComment]:
    """Oldest first; unparseable timestamps last; ties by comment id."""
    return sorted(comments, key=lambda comment: (timestamp_of(comment.posted_at), comment.id))


def comment_wrapper_text(count: int) -> str:
    return "\n".join([COMMENTS_HEADER, property_line(COMMENTS_PROPERTY, str(count))])


def build_comment_blocks(task: CanonicalTask) -> list[BlockNode]:
    if not task.comments:
        return []
    ordered = sort_comments(task.comments)
    wrapper = BlockNode(
        text=comment_wrapper_text(len(ordered)),
        children=tuple(BlockNode(text=comment_text(task, comment)) for comment in ordered),
    )
    return [wrapper]


def build_tree(
    task: CanonicalTask,
    project_names: dict[str, str],
    label_names: dict[str, str],
    status_aliases: StatusAliases,
) -> BlockNode:
    children = [
        *build_property_blocks(task, label_names, status_aliases),
        *build_comment_blocks(task),
    ]
    return BlockNode(text=block_title(task, project_names), children=tuple(children))


class RoamBlockRenderer(TaskRenderer):
    def render(self, task: CanonicalTask, context: RenderContext) -> BlockNode:
        return build_tree(task, context.project_names, context.label_names, context.status_aliases)
