from __future__ import annotations

import os
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class RedisConfig(BaseModel):
    """Configuration for the Redis notification backend."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    key_prefix: str = "draftflow:notifications"


class NotificationConfig(BaseModel):
    """Notification dispatch settings."""

    backend: Literal["inmemory", "log", "redis"] = "log"
    redis: RedisConfig = Field(default_factory=RedisConfig)


class RoleConfig(BaseModel):
    """Actor role resolution settings."""

    cache_ttl_seconds: float = 300.0
    actors: Dict[str, str] = Field(default_factory=dict)


class DraftflowConfig(BaseModel):
    """Top-level configuration model."""

    database_url: Optional[str] = None
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    roles: RoleConfig = Field(default_factory=RoleConfig)


def load_config(path: Optional[str] = None) -> DraftflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to DRAFTFLOW_CONFIG env
            variable or 'draftflow.yaml' in the current directory.
    """

    config_path = path or os.getenv("DRAFTFLOW_CONFIG", "draftflow.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = DraftflowConfig(**data)
    else:
        config = DraftflowConfig()

    env_db_url = os.getenv("DRAFTFLOW_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    env_notifier = os.getenv("DRAFTFLOW_NOTIFIER")
    if env_notifier:
        config.notifications.backend = env_notifier.lower()
    return config
