"""Static secret resolver."""

from __future__ import annotations

from dataclasses import dataclass

from eslsync.auth.base import SecretResolver
from eslsync.contracts.exceptions import AuthenticationError


@dataclass(frozen=True)
class StaticSecretResolver(SecretResolver):
    secret: str

    async def resolve(self) -> str:
        resolved = self.secret.strip()
        if not resolved:
            raise AuthenticationError("Static encryption key is empty")
        return resolved
