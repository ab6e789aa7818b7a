"""Token resolver factory."""

from __future__ import annotations

from pydantic import SecretStr

from todoist_backup.auth.base import TokenResolver
from todoist_backup.auth.resolvers import EnvTokenResolver, StaticTokenResolver
from todoist_backup.contracts.exceptions import AuthenticationError

TODOIST_TOKEN_ENV = "TODOIST_API_TOKEN"
ROAM_TOKEN_ENV = "ROAM_API_TOKEN"


def create_token_resolver(value: SecretStr | str | None, env_var: str) -> TokenResolver:
    """A configured token wins; otherwise the token is read from *env_var*."""
    raw = value.get_secret_value() if isinstance(value, SecretStr) else value
    if raw and raw.strip():
        return StaticTokenResolver(token=raw)
    return EnvTokenResolver(var=env_var)


async def resolve_optional_token(resolver: TokenResolver) -> str | None:
    try:
        return await resolver.resolve()
    except AuthenticationError:
        return None
