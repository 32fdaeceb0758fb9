from __future__ import annotations

from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Optional

from .settings import Settings, get_settings


# PUBLIC_INTERFACE
class KeyValueStore(ABC):
    """Abstract contract for the durable string key-value backends."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the raw value stored under key, or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""


class InMemoryKeyValueStore(KeyValueStore):
    """
    Thread-safe in-memory backend suitable for testing and default runtime.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = RLock()
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


# PUBLIC_INTERFACE
def get_key_value_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """
    Factory to return the configured durable backend based on settings.
    - memory: InMemoryKeyValueStore
    - sqlite: SQLiteKeyValueStore at settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.storage_backend == "sqlite":
        from .db import SQLiteKeyValueStore

        return SQLiteKeyValueStore(settings.sqlite_db_path)
    return InMemoryKeyValueStore()
