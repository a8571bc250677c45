from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LEADERLOCK_", env_file=".env", extra="ignore")

    # Key-value store backend
    backend: Literal["redis", "nats", "memory"] = "redis"

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    redis_prefix: str = "leaderlock"

    # NATS JetStream
    nats_url: str = Field(default="nats://localhost:4222", validation_alias="NATS_URL")
    nats_connect_timeout: float = 2.0

    # Lock bucket
    bucket: str = "leaderlock"
    bucket_ttl: float = Field(default=60.0, gt=0)  # Seconds
    key_name: str = "leader"

    # Election loop; defaults to a third of the bucket TTL when unset
    renewal_interval: float | None = Field(default=None, gt=0)

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
