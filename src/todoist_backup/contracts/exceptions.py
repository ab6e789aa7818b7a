"""Exception hierarchy for todoist-backup.

All library errors inherit from :class:`TodoistBackupError` so callers can
catch everything with one ``except`` clause while still handling specific
failure modes.
"""

from __future__ import annotations


class TodoistBackupError(Exception):
    """Base exception for all todoist-backup errors."""


class ConfigError(TodoistBackupError):
    """Configuration loading or validation failure."""


class AuthenticationError(TodoistBackupError):
    """A required credential is missing or was rejected."""


class SourceError(TodoistBackupError):
    """Fetching from the remote task source failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GatewayError(TodoistBackupError):
    """A destination read or mutation failed."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class SyncError(TodoistBackupError):
    """Engine-level synchronization failure."""
