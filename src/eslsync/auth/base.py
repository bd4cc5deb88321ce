"""Secret resolver interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SecretResolver(ABC):
    @abstractmethod
    async def resolve(self) -> str:
        """Resolve and return the secret used to decrypt stored AIMS passwords."""
