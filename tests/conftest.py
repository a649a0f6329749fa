"""Shared fixtures."""

import pytest

from feed_aggregator.config import CacheConfig, Config, GroupsConfig, WebConfig
from feed_aggregator.storage.kv import MemoryKeyValueStore


@pytest.fixture
def store() -> MemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def config() -> Config:
    """Configuration with an admin token and no inline groups."""
    return Config(
        cache=CacheConfig(ttl_seconds=900, default_limit=100, max_age_cap_seconds=60),
        groups=GroupsConfig(inline_json=None, config_url=None),
        web=WebConfig(admin_token="secret", cors_allow_origin="*"),
    )
