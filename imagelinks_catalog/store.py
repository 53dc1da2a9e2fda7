"""Catalog Store - Load and save the catalog document and hit counter."""

import json
import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError

from imagelinks_catalog.exceptions import (
    CatalogCorruptedError,
    CatalogError,
    StorageUnavailableError,
)
from imagelinks_catalog.interfaces import KeyValueStoreInterface
from imagelinks_catalog.models import LinkRecord
from imagelinks_core.constants import KEY_API_HITS, KEY_IMAGE_LIST

logger = logging.getLogger(__name__)


class CatalogStore:
    """Whole-document persistence of the catalog on top of a key-value store."""

    def __init__(
        self,
        kv: KeyValueStoreInterface,
        catalog_key: str = KEY_IMAGE_LIST,
        hits_key: str = KEY_API_HITS,
    ):
        self._kv = kv
        self._catalog_key = catalog_key
        self._hits_key = hits_key

    @property
    def kv(self) -> KeyValueStoreInterface:
        return self._kv

    # Catalog
    def load_catalog(self) -> List[LinkRecord]:
        raw = self._get(self._catalog_key)
        if raw is None:
            return []

        try:
            documents = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CatalogCorruptedError("Catalog document is not valid JSON", str(e)) from e
        if not isinstance(documents, list):
            raise CatalogCorruptedError("Catalog document must be a JSON array")

        records: List[LinkRecord] = []
        for doc in documents:
            try:
                records.append(LinkRecord.from_stored(doc))
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable catalog entry: {e}")

        logger.debug(f"Loaded {len(records)} records from '{self._catalog_key}'")
        return records

    def save_catalog(self, records: Sequence[LinkRecord]) -> None:
        payload = json.dumps([record.to_document() for record in records], ensure_ascii=False)
        self._put(self._catalog_key, payload)
        logger.debug(f"Saved {len(records)} records to '{self._catalog_key}'")

    def export_document(self) -> str:
        """Raw catalog JSON for backups."""
        return self._get(self._catalog_key) or "[]"

    # Hit counter
    def load_hit_counter(self) -> int:
        raw = self._get(self._hits_key)
        if raw is None:
            return 0
        try:
            return max(int(raw), 0)
        except ValueError:
            logger.warning(f"Ignoring unparsable hit counter value: {raw!r}")
            return 0

    def save_hit_counter(self, hits: int) -> None:
        if hits < 0:
            raise ValueError("Hit counter cannot be negative")
        self._put(self._hits_key, str(hits))

    def increment_hit_counter(self) -> int:
        # Read-then-write; simultaneous requests may under-count
        hits = self.load_hit_counter() + 1
        self.save_hit_counter(hits)
        return hits

    # Store access
    def _get(self, key: str) -> Optional[str]:
        try:
            return self._kv.get(key)
        except CatalogError:
            raise
        except Exception as e:
            logger.error(f"Store read failed for '{key}': {e}")
            raise StorageUnavailableError("Store read failed", str(e)) from e

    def _put(self, key: str, value: str) -> None:
        try:
            self._kv.put(key, value)
        except CatalogError:
            raise
        except Exception as e:
            logger.error(f"Store write failed for '{key}': {e}")
            raise StorageUnavailableError("Store write failed", str(e)) from e
