"""
Key-value stores with optional per-key time-to-live.

Values are JSON-compatible objects. The aggregation core only relies on
``get``/``put``; expiry policy belongs to the store.
"""

import json
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Optional

from feed_aggregator.config import StorageConfig
from feed_aggregator.logger import get_logger
from feed_aggregator.models import KVEntryModel
from feed_aggregator.storage.database import DatabaseManager

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Interface of the key-value collaborator."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when absent or expired."""

    @abstractmethod
    def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store a value, expiring after ``ttl_seconds`` when given."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""


class MemoryKeyValueStore(KeyValueStore):
    """In-process store guarded by a lock."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._data[key]
                return None
        # Stored as JSON so callers never share mutable state with the store
        return json.loads(raw)

    def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        raw = json.dumps(value)
        with self._lock:
            self._data[key] = (raw, expires_at)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._data)


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the ``kv_entries`` table."""

    def __init__(self, db_manager: DatabaseManager):
        """Initialize the store.

        Args:
            db_manager: DatabaseManager whose tables have been created
        """
        self.db_manager = db_manager

    def get(self, key: str) -> Optional[Any]:
        with self.db_manager.session() as session:
            entry = session.get(KVEntryModel, key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= datetime.utcnow():
                logger.debug(f"Key expired: {key}")
                session.delete(entry)
                return None
            raw = entry.value

        return json.loads(raw)

    def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        expires_at = datetime.utcnow() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        raw = json.dumps(value)

        with self.db_manager.session() as session:
            entry = session.get(KVEntryModel, key)
            if entry is None:
                session.add(KVEntryModel(key=key, value=raw, expires_at=expires_at))
            else:
                entry.value = raw
                entry.expires_at = expires_at

    def delete(self, key: str) -> bool:
        with self.db_manager.session() as session:
            entry = session.get(KVEntryModel, key)
            if entry is None:
                return False
            session.delete(entry)
            return True

    def purge_expired(self) -> int:
        """Delete every expired row.

        Returns:
            Number of rows removed
        """
        with self.db_manager.session() as session:
            removed = (
                session.query(KVEntryModel)
                .filter(KVEntryModel.expires_at.is_not(None))
                .filter(KVEntryModel.expires_at <= datetime.utcnow())
                .delete(synchronize_session=False)
            )

        if removed:
            logger.info(f"Purged {removed} expired keys")
        return removed


def create_store(storage_config: StorageConfig) -> KeyValueStore:
    """Create the key-value store selected by configuration.

    Args:
        storage_config: Storage section of the configuration

    Returns:
        Configured KeyValueStore instance
    """
    if storage_config.type == "sqlite":
        db_manager = DatabaseManager(storage_config.path, echo=storage_config.echo)
        db_manager.init_db()
        logger.info(f"Using SQLite key-value store at {storage_config.path}")
        return SqlKeyValueStore(db_manager)

    logger.info("Using in-memory key-value store")
    return MemoryKeyValueStore()
