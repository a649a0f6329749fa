"""Storage layer: key-value stores and the SQL session manager."""

from feed_aggregator.storage.database import DatabaseManager
from feed_aggregator.storage.kv import (
    KeyValueStore,
    MemoryKeyValueStore,
    SqlKeyValueStore,
    create_store,
)

__all__ = [
    "DatabaseManager",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqlKeyValueStore",
    "create_store",
]
