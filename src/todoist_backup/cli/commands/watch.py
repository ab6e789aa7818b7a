"""Watch command: one run now, then periodic automatic runs."""

from __future__ import annotations

import argparse
import asyncio
import logging

from todoist_backup.contracts.sync import SyncOutcome


async def run_watch(args: argparse.Namespace) -> SyncOutcome:
    import todoist_backup.cli as cli

    config_path = args.config
    config = cli.load_config(config_path)
    # Automatic runs report through the session logger.
    logging.getLogger("todoist_backup.session").setLevel(logging.INFO)

    async with cli.SyncSession(lambda: cli.load_config(config_path)) as session:
        outcome = await session.sync("manual")
        print(cli._format_summary(outcome))
        await session.start()
        print(f"Watching: next sync in {config.interval_minutes} minute(s). Press Ctrl+C to stop.")
        await asyncio.Event().wait()
    return outcome  # pragma: no cover


__all__ = ["run_watch"]
