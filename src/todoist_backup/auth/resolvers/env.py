"""Environment token resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass

from todoist_backup.auth.base import TokenResolver
from todoist_backup.contracts.exceptions import AuthenticationError


@dataclass(frozen=True)
class EnvTokenResolver(TokenResolver):
    var: str

    async def resolve(self) -> str:
        token = (os.getenv(self.var) or "").strip()
        if not token:
            raise AuthenticationError(f"{self.var} is not set or empty")
        return token
