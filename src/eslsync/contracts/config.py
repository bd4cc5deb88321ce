"""Configuration contracts."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class GatewayConfig(BaseModel):
    timeout_seconds: float = Field(default=10.0, gt=0)
    page_size: int = Field(default=100, ge=1)
    max_pages: int = Field(default=50, ge=1)
    batch_size: int = Field(default=500, ge=1)
    max_retries: int = Field(default=3, ge=0)
    format_ttl_seconds: float = Field(default=1800.0, ge=0)
    token_expiry_buffer_seconds: float = Field(default=300.0, ge=0)
    fail_on_truncation: bool = False

    model_config = {"frozen": True}


class EslSyncConfig(BaseModel):
    database_url: str
    interval_seconds: float = Field(default=60.0, gt=0)
    initial_delay_seconds: float = Field(default=15.0, ge=0)
    settings_ttl_seconds: float = Field(default=60.0, ge=0)
    max_concurrent_stores: int = Field(default=1, ge=1, le=10)
    auth: str = "env"
    encryption_key: str | None = None
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_auth_key(self) -> EslSyncConfig:
        key = (self.encryption_key or "").strip()
        if self.auth == "static":
            if not key:
                raise ValueError("static auth requires a non-empty encryption_key")
            return self
        if key:
            raise ValueError("encryption_key must be unset when auth is not 'static'")
        if self.auth != "env":
            raise ValueError("auth must be one of: env, static")
        return self
