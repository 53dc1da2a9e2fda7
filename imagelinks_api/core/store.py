"""Store - Key-value store connection management."""

import logging
from typing import Optional

from imagelinks_catalog.interfaces import KeyValueStoreInterface
from imagelinks_catalog.kv import JsonFileKeyValueStore
from imagelinks_core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class StoreManager:
    """Singleton manager for the key-value store back-end."""

    _instance: Optional["StoreManager"] = None
    _store: Optional[KeyValueStoreInterface] = None

    def __new__(cls) -> "StoreManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        self._settings: Settings = get_settings()

    def get_store(self) -> KeyValueStoreInterface:
        if self._store is None:
            self._store = self._create_store()
        return self._store

    def _create_store(self) -> KeyValueStoreInterface:
        logger.info(f"Opening key-value store: {self._settings.store_path}")
        return JsonFileKeyValueStore(self._settings.store_path)

    def close(self) -> None:
        if self._store is not None:
            logger.info("Closing key-value store")
            self._store.close()
            self._store = None


_manager: Optional[StoreManager] = None


def get_key_value_store() -> KeyValueStoreInterface:
    """Get key-value store singleton."""
    global _manager
    if _manager is None:
        _manager = StoreManager()
    return _manager.get_store()


def close_key_value_store() -> None:
    """Close key-value store."""
    global _manager
    if _manager is not None:
        _manager.close()
        _manager = None
