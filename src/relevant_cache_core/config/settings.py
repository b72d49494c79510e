"""Application settings using pydantic-settings."""

from __future__ import annotations

from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relevant_cache_core.constants import PLAIN_SCHEMES, TLS_SCHEMES


class Settings(BaseSettings):
    """Central configuration for relevant-cache."""

    model_config = SettingsConfigDict(env_prefix="RC_", env_file=".env")

    # --- Backend ---
    cache_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Storage backend: 'memory' for in-process, 'redis' for networked",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis endpoint; tls:// or rediss:// enables TLS",
    )
    skip_tls_verify: bool = Field(
        default=False,
        description="Skip server certificate verification on TLS connections",
    )
    scan_count: int | None = Field(
        default=None,
        description="Use SCAN with this COUNT hint for wildcard listing instead of KEYS",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer: 'console' for humans, 'json' for machines",
    )

    @model_validator(mode="after")
    def validate_redis_config(self) -> Settings:
        """Validate the Redis endpoint scheme and scan hint."""
        scheme = urlparse(self.redis_url).scheme
        if scheme not in (*PLAIN_SCHEMES, *TLS_SCHEMES):
            msg = f"redis_url scheme must be one of redis, tls, rediss; got {scheme!r}"
            raise ValueError(msg)
        if self.scan_count is not None and self.scan_count <= 0:
            msg = "scan_count must be positive"
            raise ValueError(msg)
        return self
