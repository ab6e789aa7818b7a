"""Remote task sources and factory."""

from todoist_backup.sources.demo import DemoSource
from todoist_backup.sources.factory import create_source
from todoist_backup.sources.todoist import TodoistClient

__all__ = ["DemoSource", "TodoistClient", "create_source"]
