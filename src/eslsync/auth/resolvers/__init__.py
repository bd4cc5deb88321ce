"""Concrete secret resolvers."""

from eslsync.auth.resolvers.env import ENCRYPTION_KEY_ENV, EnvSecretResolver
from eslsync.auth.resolvers.static import StaticSecretResolver

__all__ = ["ENCRYPTION_KEY_ENV", "EnvSecretResolver", "StaticSecretResolver"]
