"""Key-Value Store - Back-ends for the external store contract."""

import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from imagelinks_catalog.exceptions import StorageUnavailableError
from imagelinks_catalog.interfaces import KeyValueStoreInterface

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Process-local store, used for tests and throwaway runs."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and expires_at <= self._clock():
                del self._data[key]
                return None
            return value

    def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        with self._lock:
            self._data[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def close(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    Single JSON file holding every key.

    Each write rewrites the whole file through a temp file and os.replace,
    so a reader never sees a half-written document.
    """

    def __init__(self, path: Path, clock: Callable[[], float] = time.time):
        self._path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._read().get(key)
        if not isinstance(entry, dict):
            return None
        expires_at = entry.get("expires_at")
        if expires_at is not None and expires_at <= self._clock():
            return None
        return entry.get("value")

    def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        entry: Dict[str, Any] = {
            "value": value,
            "expires_at": self._clock() + ttl if ttl else None,
        }
        with self._lock:
            data = self._purge_expired(self._read())
            data[key] = entry
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def close(self) -> None:
        logger.debug(f"Closed file store: {self._path}")

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageUnavailableError("Store file is not valid JSON", str(e)) from e
        except OSError as e:
            raise StorageUnavailableError("Failed to read store file", str(e)) from e

        if not isinstance(data, dict):
            raise StorageUnavailableError("Store file must contain a JSON object")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        temp_path: Optional[str] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self._path.parent, suffix=".tmp", delete=False
            ) as f:
                temp_path = f.name
                json.dump(data, f, ensure_ascii=False)
            os.replace(temp_path, self._path)
        except OSError as e:
            if temp_path is not None:
                Path(temp_path).unlink(missing_ok=True)
            raise StorageUnavailableError("Failed to write store file", str(e)) from e

    def _purge_expired(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = self._clock()
        return {
            key: entry
            for key, entry in data.items()
            if not (isinstance(entry, dict) and entry.get("expires_at") is not None and entry["expires_at"] <= now)
        }
