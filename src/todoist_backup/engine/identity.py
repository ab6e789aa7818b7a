"""Identity and status extraction from block trees.

Both desired trees (:class:`BlockNode`) and trees read from the graph
(:class:`ExistingBlock`) are scanned the same way: a block's own text first,
then each direct child once. This accepts the legacy layout where
``todoist-id::`` lived in the task block itself as well as the current one
where properties are child blocks.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from todoist_backup.contracts.blocks import ExistingBlock
from todoist_backup.contracts.config import StatusAliases
from todoist_backup.contracts.task import TaskStatus
from todoist_backup.properties import (
    COMMENTS_PROPERTY,
    COMPLETED_PROPERTY,
    ID_PROPERTY,
    PLACEHOLDER_CONTENT,
    STATUS_PROPERTY,
)


class TreeNode(Protocol):
    @property
    def text(self) -> str: ...  # pragma: no cover

    @property
    def children(self) -> Sequence[TreeNode]: ...  # pragma: no cover


def _property_value_re(key: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(key)}::\s*(.+)$", re.IGNORECASE | re.MULTILINE)


_ID_VALUE_RE = _property_value_re(ID_PROPERTY)
_STATUS_VALUE_RE = _property_value_re(STATUS_PROPERTY)
_COMPLETED_VALUE_RE = _property_value_re(COMPLETED_PROPERTY)
_COMMENTS_MARKER_RE = re.compile(rf"^{re.escape(COMMENTS_PROPERTY)}::", re.MULTILINE)
_LINKED_ID_RE = re.compile(r"^\[([^\]]+)\]\(")
_PLAIN_ID_RE = re.compile(r"^([\w-]+)")
_PROPERTY_KEY_RE = re.compile(r"^([\w-]+)::")


def extract_identity_from_text(text: str) -> str | None:
    """Task id from a ``todoist-id::`` line: ``[123](url)``, ``123`` or raw value."""
    match = _ID_VALUE_RE.search(text or "")
    if match is None:
        return None
    value = match.group(1).strip()
    linked = _LINKED_ID_RE.match(value)
    if linked:
        return linked.group(1)
    plain = _PLAIN_ID_RE.match(value)
    if plain:
        return plain.group(1)
    return value or None


def extract_identity(node: TreeNode) -> str | None:
    identity = extract_identity_from_text(node.text)
    if identity:
        return identity
    for child in node.children:
        identity = extract_identity_from_text(child.text)
        if identity:
            return identity
    return None


def extract_property_key(text: str) -> str | None:
    """``todoist-due`` for ``todoist-due:: January 2nd, 2025``; ``None`` otherwise."""
    match = _PROPERTY_KEY_RE.match(text or "")
    return match.group(1) if match else None


def is_comment_wrapper(text: str) -> bool:
    return bool(_COMMENTS_MARKER_RE.search(text or ""))


def is_placeholder(text: str) -> bool:
    return (text or "").strip() == PLACEHOLDER_CONTENT


def _scan_texts(node: TreeNode) -> list[str]:
    return [node.text or "", *(child.text or "" for child in node.children)]


def _status_from_value(value: str, aliases: StatusAliases) -> TaskStatus | None:
    lowered = value.lower()
    for status in TaskStatus:
        if lowered == status.value:
            return status
    if value == aliases.completed:
        return TaskStatus.COMPLETED
    if value == aliases.active:
        return TaskStatus.ACTIVE
    if value == aliases.deleted:
        return TaskStatus.DELETED
    return None


def extract_recorded_status(node: TreeNode, aliases: StatusAliases) -> TaskStatus | None:
    """Status recorded on a stored task block.

    The ``todoist-status::`` value is matched against the raw status names and
    the configured aliases. When no status is recognizable, a
    ``todoist-completed::`` property means the task was completed.
    """
    texts = _scan_texts(node)
    for text in texts:
        match = _STATUS_VALUE_RE.search(text)
        if match:
            status = _status_from_value(match.group(1).strip(), aliases)
            if status is not None:
                return status
    if any(_COMPLETED_VALUE_RE.search(text) for text in texts):
        return TaskStatus.COMPLETED
    return None


@dataclass
class BlockIndex:
    """Top-level blocks of a page keyed by task id.

    The first block claiming an id wins; later claimants are kept in
    ``duplicates``.
    """

    by_identity: dict[str, ExistingBlock] = field(default_factory=dict)
    duplicates: list[tuple[str, ExistingBlock]] = field(default_factory=list)


def build_block_index(tree: Sequence[ExistingBlock]) -> BlockIndex:
    index = BlockIndex()
    for node in tree:
        identity = extract_identity(node)
        if identity is None:
            continue
        if identity in index.by_identity:
            index.duplicates.append((identity, node))
            continue
        index.by_identity[identity] = node
    return index
