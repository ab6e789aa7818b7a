"""Auth module public exports."""

from todoist_backup.auth.base import TokenResolver
from todoist_backup.auth.factory import (
    ROAM_TOKEN_ENV,
    TODOIST_TOKEN_ENV,
    create_token_resolver,
    resolve_optional_token,
)

__all__ = [
    "ROAM_TOKEN_ENV",
    "TODOIST_TOKEN_ENV",
    "TokenResolver",
    "create_token_resolver",
    "resolve_optional_token",
]
