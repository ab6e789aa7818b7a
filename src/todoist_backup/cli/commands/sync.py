"""Sync command formatting."""

from __future__ import annotations

import argparse

from todoist_backup.cli.common import format_comma_or_none, format_count
from todoist_backup.cli.progress.rich import RichSyncProgress
from todoist_backup.contracts.sync import SyncOutcome, SyncStatus


def format_sync_summary(outcome: SyncOutcome) -> str:
    if outcome.status != SyncStatus.COMPLETED or outcome.result is None:
        return f"\ntodoist-backup - sync {outcome.status.value}: {outcome.message}\n"

    result = outcome.result
    mode = "dry-run" if result.dry_run else "apply"
    lines = [
        "",
        f"todoist-backup - sync complete ({mode})",
        "",
        "  Tasks:     {} synced ({} active, {} completed, {} excluded)".format(
            outcome.synced_tasks,
            outcome.active_tasks,
            outcome.completed_tasks,
            outcome.excluded_tasks,
        ),
        f"  Pages:     {format_count(len(result.locations), 'page')} touched, {result.pages_created} created",
        f"  Blocks:    {result.created} created, {result.updated} updated, {result.deleted} deleted",
    ]
    if result.retained:
        lines.append(f"  Retained:  {format_count(result.retained, 'completed task')}")
    if result.duplicates_removed or result.placeholders_removed:
        lines.append(
            f"  Removed:   {format_count(result.duplicates_removed, 'duplicate')}, "
            f"{format_count(result.placeholders_removed, 'placeholder')}"
        )
    if result.skipped_roots:
        lines.append(f"  Skipped:   {format_count(result.skipped_roots, 'block')} without a task id")
    if result.cleaned_locations:
        lines.append(f"  Cleaned:   {format_comma_or_none(result.cleaned_locations)}")
    if result.mutations == 0:
        lines.append("  Status:    graph already up to date")

    if result.dry_run:
        lines.append("")
        lines.append("  [dry-run] No changes were made")

    lines.append("")
    return "\n".join(lines)


async def run_sync(args: argparse.Namespace) -> SyncOutcome:
    import todoist_backup.cli as cli

    config_path = args.config
    cli.load_config(config_path)

    async with cli.SyncSession(lambda: cli.load_config(config_path)) as session:
        if not args.verbose:
            with RichSyncProgress() as progress:
                outcome = await session.sync("manual", dry_run=args.dry_run, progress=progress)
        else:
            outcome = await session.sync("manual", dry_run=args.dry_run)

    print(cli._format_summary(outcome))
    return outcome


__all__ = ["format_sync_summary", "run_sync"]
