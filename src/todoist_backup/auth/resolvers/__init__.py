"""Concrete token resolvers."""

from todoist_backup.auth.resolvers.env import EnvTokenResolver
from todoist_backup.auth.resolvers.static import StaticTokenResolver

__all__ = ["EnvTokenResolver", "StaticTokenResolver"]
