"""Command-line interface for todoist-backup."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from todoist_backup.cli.app import main as main
from todoist_backup.cli.commands import sync as sync_command
from todoist_backup.cli.commands import watch as watch_command
from todoist_backup.cli.parser import build_parser as build_parser
from todoist_backup.config import load_config as load_config
from todoist_backup.session import SyncSession as SyncSession

_format_summary = sync_command.format_sync_summary
_run_sync = sync_command.run_sync
_run_watch = watch_command.run_watch

__all__ = ["build_parser", "main"]
