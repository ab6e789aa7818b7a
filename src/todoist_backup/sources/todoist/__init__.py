"""Todoist task source."""

from todoist_backup.sources.todoist.client import TodoistClient, extract_items, get_cursor

__all__ = ["TodoistClient", "extract_items", "get_cursor"]
