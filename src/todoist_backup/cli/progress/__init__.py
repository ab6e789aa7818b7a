"""Terminal progress displays."""

from todoist_backup.cli.progress.rich import RichSyncProgress

__all__ = ["RichSyncProgress"]
