"""Pure diff between a location's stored blocks and its desired blocks.

Nothing here talks to the gateway: given a snapshot of one page and the
desired task trees for it, the planner returns the ordered mutation intents
that bring the page in line. The executor applies them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from todoist_backup.contracts.blocks import (
    BlockNode,
    CreateBlock,
    DeleteBlock,
    ExistingBlock,
    MutationIntent,
    UpdateBlock,
)
from todoist_backup.contracts.config import StatusAliases
from todoist_backup.contracts.task import TaskStatus
from todoist_backup.engine.identity import (
    build_block_index,
    extract_identity,
    extract_property_key,
    extract_recorded_status,
    is_comment_wrapper,
    is_placeholder,
)


@dataclass
class LocationPlan:
    container_uid: str
    intents: list[MutationIntent] = field(default_factory=list)
    seen: set[str] = field(default_factory=set)
    retained: int = 0
    duplicates: int = 0
    placeholders: int = 0
    skipped: int = 0

    @property
    def is_noop(self) -> bool:
        return not self.intents


def same_subtree(existing: ExistingBlock, desired: BlockNode) -> bool:
    if existing.text != desired.text or len(existing.children) != len(desired.children):
        return False
    ordered = sorted(existing.children, key=lambda child: child.order)
    return all(same_subtree(current, wanted) for current, wanted in zip(ordered, desired.children, strict=True))


def plan_children(existing: ExistingBlock, desired: BlockNode, identity: str) -> list[MutationIntent]:
    """Property blocks are matched by key; the comment wrapper as a whole subtree.

    Children that carry no property key and are not a comment wrapper were
    added by the user and are left alone.
    """
    existing_props: dict[str, ExistingBlock] = {}
    existing_wrappers: list[ExistingBlock] = []
    for child in existing.children:
        if is_comment_wrapper(child.text):
            existing_wrappers.append(child)
            continue
        key = extract_property_key(child.text)
        if key is not None and key not in existing_props:
            existing_props[key] = child

    intents: list[MutationIntent] = []
    for child in desired.children:
        if is_comment_wrapper(child.text):
            if len(existing_wrappers) == 1 and same_subtree(existing_wrappers[0], child):
                continue
            intents.extend(DeleteBlock(uid=wrapper.uid, identity=identity, reason="comments") for wrapper in existing_wrappers)
            intents.append(CreateBlock(parent_uid=existing.uid, node=child, identity=identity))
            continue

        key = extract_property_key(child.text)
        if key is None:
            continue
        current = existing_props.get(key)
        if current is None:
            intents.append(CreateBlock(parent_uid=existing.uid, node=child, identity=identity))
        elif current.text != child.text:
            intents.append(UpdateBlock(uid=current.uid, text=child.text, identity=identity))
    return intents


def _retire(node: ExistingBlock, identity: str, aliases: StatusAliases, plan: LocationPlan, reason: str) -> bool:
    # Completed tasks are never deleted, repeated copies included.
    if extract_recorded_status(node, aliases) == TaskStatus.COMPLETED:
        plan.retained += 1
        return False
    plan.intents.append(DeleteBlock(uid=node.uid, identity=identity, reason=reason))
    return True


def plan_location(
    container_uid: str,
    existing_tree: Sequence[ExistingBlock],
    desired_roots: Sequence[BlockNode],
    aliases: StatusAliases,
) -> LocationPlan:
    """Plan creates, in-place updates and deletions for one page.

    Intents are ordered: desired tasks in input order, then duplicate and
    obsolete removals, then placeholder cleanup.
    """
    plan = LocationPlan(container_uid=container_uid)
    index = build_block_index(existing_tree)

    for node in desired_roots:
        identity = extract_identity(node)
        if identity is None:
            plan.skipped += 1
            continue
        if identity in plan.seen:
            continue
        plan.seen.add(identity)

        existing = index.by_identity.get(identity)
        if existing is None:
            plan.intents.append(CreateBlock(parent_uid=container_uid, node=node, identity=identity))
            continue
        if existing.text != node.text:
            plan.intents.append(UpdateBlock(uid=existing.uid, text=node.text, identity=identity))
        plan.intents.extend(plan_children(existing, node, identity))

    for identity, duplicate in index.duplicates:
        reason = "duplicate" if identity in plan.seen else "obsolete"
        if _retire(duplicate, identity, aliases, plan, reason) and reason == "duplicate":
            plan.duplicates += 1

    for identity, node in index.by_identity.items():
        if identity not in plan.seen:
            _retire(node, identity, aliases, plan, "obsolete")

    for node in existing_tree:
        if is_placeholder(node.text):
            plan.placeholders += 1
            plan.intents.append(DeleteBlock(uid=node.uid, reason="placeholder"))

    return plan


def plan_cleanup(container_uid: str, existing_tree: Sequence[ExistingBlock], aliases: StatusAliases) -> LocationPlan:
    """Plan for a page no desired task maps to this run."""
    return plan_location(container_uid, existing_tree, [], aliases)
