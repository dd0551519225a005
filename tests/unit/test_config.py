"""Tests for configuration loading."""

import pytest

from draftflow.config import load_config
from draftflow.exceptions import ConfigurationError
from draftflow.notifications import (
    InMemoryNotificationDispatcher,
    LoggingNotificationDispatcher,
    get_dispatcher,
)
from draftflow.notifications.redis import RedisNotificationDispatcher


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("DRAFTFLOW_CONFIG", "DRAFTFLOW_DATABASE_URL", "DATABASE_URL", "DRAFTFLOW_NOTIFIER"):
        monkeypatch.delenv(name, raising=False)


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
database_url: sqlite:///drafts.db
notifications:
  backend: redis
  redis:
    host: testhost
    port: 1234
roles:
  cache_ttl_seconds: 30
  actors:
    b1: principal
"""
    )
    monkeypatch.setenv("DRAFTFLOW_CONFIG", str(config_path))

    config = load_config()
    assert config.database_url == "sqlite:///drafts.db"
    assert config.notifications.backend == "redis"
    assert config.notifications.redis.host == "testhost"
    assert config.notifications.redis.port == 1234
    assert config.roles.cache_ttl_seconds == 30
    assert config.roles.actors == {"b1": "principal"}


def test_load_config_defaults_when_file_missing(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))

    assert config.database_url is None
    assert config.notifications.backend == "log"
    assert config.roles.cache_ttl_seconds == 300


def test_env_overrides_file(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("database_url: sqlite:///from-file.db\n")
    monkeypatch.setenv("DRAFTFLOW_DATABASE_URL", "sqlite:///from-env.db")
    monkeypatch.setenv("DRAFTFLOW_NOTIFIER", "InMemory")

    config = load_config(str(config_path))
    assert config.database_url == "sqlite:///from-env.db"
    assert config.notifications.backend == "inmemory"


def test_get_dispatcher_uses_config(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
notifications:
  backend: redis
  redis:
    host: confighost
    port: 6380
    key_prefix: acme
"""
    )
    monkeypatch.setenv("DRAFTFLOW_CONFIG", str(config_path))

    dispatcher = get_dispatcher()
    assert isinstance(dispatcher, RedisNotificationDispatcher)
    assert dispatcher.host == "confighost"
    assert dispatcher.port == 6380
    assert dispatcher.queue_name("broker") == "acme:broker"


def test_get_dispatcher_backends(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))

    assert isinstance(get_dispatcher(config=config), LoggingNotificationDispatcher)
    assert isinstance(get_dispatcher("inmemory", config), InMemoryNotificationDispatcher)
    with pytest.raises(ConfigurationError):
        get_dispatcher("carrier-pigeon", config)
