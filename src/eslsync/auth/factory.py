"""Secret resolver factory."""

from __future__ import annotations

from eslsync.auth.base import SecretResolver
from eslsync.auth.resolvers.env import EnvSecretResolver
from eslsync.auth.resolvers.static import StaticSecretResolver
from eslsync.contracts.config import EslSyncConfig
from eslsync.contracts.exceptions import ConfigError

RESOLVERS: dict[str, type[SecretResolver]] = {
    "env": EnvSecretResolver,
    "static": StaticSecretResolver,
}


def create_secret_resolver(config: EslSyncConfig) -> SecretResolver:
    auth_mode = config.auth
    if auth_mode not in RESOLVERS:
        raise ConfigError(f"Unknown auth mode: {auth_mode}")

    if auth_mode == "env":
        return EnvSecretResolver()
    return StaticSecretResolver(secret=config.encryption_key or "")
