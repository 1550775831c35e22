"""Environment token resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass

from archsync.auth.base import TokenResolver
from archsync.contracts.exceptions import AuthenticationError

DEFAULT_TOKEN_ENV = "AZURE_DEVOPS_PAT_TOKEN"


@dataclass(frozen=True)
class EnvTokenResolver(TokenResolver):
    env_var: str = DEFAULT_TOKEN_ENV

    async def resolve(self) -> str:
        token = (os.getenv(self.env_var) or "").strip()
        if not token:
            raise AuthenticationError(f"{self.env_var} is not set or empty")
        return token
