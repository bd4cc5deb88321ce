"""Environment secret resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass

from eslsync.auth.base import SecretResolver
from eslsync.contracts.exceptions import AuthenticationError

ENCRYPTION_KEY_ENV = "ESLSYNC_ENCRYPTION_KEY"


@dataclass(frozen=True)
class EnvSecretResolver(SecretResolver):
    variable: str = ENCRYPTION_KEY_ENV

    async def resolve(self) -> str:
        secret = (os.getenv(self.variable) or "").strip()
        if not secret:
            raise AuthenticationError(f"{self.variable} is not set or empty")
        return secret
