"""Mutation Engine - Replace, append-with-dedup and batch delete."""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Set, Tuple

from imagelinks_catalog.exceptions import InvalidFormatError, NotFoundError
from imagelinks_catalog.models import LinkRecord, normalize_record
from imagelinks_catalog.store import CatalogStore

logger = logging.getLogger(__name__)


# Results
@dataclass(frozen=True)
class ReplaceResult:
    stored: int
    dropped: int

    @property
    def message(self) -> str:
        return f"Image list replaced successfully. Stored {self.stored} unique links."


@dataclass(frozen=True)
class AppendResult:
    added: int
    total: int
    dropped: int

    @property
    def message(self) -> str:
        return f"Successfully added {self.added} new links. Total links: {self.total}."


@dataclass(frozen=True)
class DeleteResult:
    removed: int
    remaining: int

    @property
    def message(self) -> str:
        return f"Successfully deleted {self.removed} links. Remaining: {self.remaining}."


# Helpers
def _require_list(value: Any, message: str = "Invalid input format. Expected an array.") -> list:
    if not isinstance(value, list):
        raise InvalidFormatError(message)
    return value


def _collect_unique(
    raw_records: Iterable[Any],
    seen: Set[str],
) -> Tuple[List[LinkRecord], int]:
    """Normalize records in order, skipping rejects and URLs already in `seen`."""
    accepted: List[LinkRecord] = []
    dropped = 0

    for raw in raw_records:
        record = normalize_record(raw)
        if record is None:
            dropped += 1
            continue
        if record.url in seen:
            continue
        seen.add(record.url)
        accepted.append(record)

    return accepted, dropped


# Engine
class MutationEngine:
    """Read-modify-write operations over the whole catalog document."""

    def __init__(self, store: CatalogStore):
        self._store = store

    def replace_all(self, raw_records: Any) -> ReplaceResult:
        """Discard the current catalog and store the normalized input, first URL wins."""
        raw_records = _require_list(raw_records)

        records, dropped = _collect_unique(raw_records, set())
        self._store.save_catalog(records)

        logger.info(f"Catalog replaced: {len(records)} stored, {dropped} dropped")
        return ReplaceResult(stored=len(records), dropped=dropped)

    def append_unique(self, raw_records: Any) -> AppendResult:
        """Append records whose URL is new to both the catalog and this batch."""
        raw_records = _require_list(raw_records)

        catalog = self._store.load_catalog()
        existing = {record.url for record in catalog}

        added, dropped = _collect_unique(raw_records, existing)
        catalog.extend(added)
        self._store.save_catalog(catalog)

        logger.info(f"Catalog append: {len(added)} added, {dropped} dropped, total {len(catalog)}")
        return AppendResult(added=len(added), total=len(catalog), dropped=dropped)

    def batch_delete(self, urls: Any) -> DeleteResult:
        """Remove every record whose trimmed URL appears in `urls`."""
        invalid_message = "Invalid or empty URL array provided."
        urls = _require_list(urls, invalid_message)
        if not urls or not all(isinstance(url, str) for url in urls):
            raise InvalidFormatError(invalid_message)

        targets = {url.strip() for url in urls}

        catalog = self._store.load_catalog()
        kept = [record for record in catalog if record.url.strip() not in targets]
        removed = len(catalog) - len(kept)

        if removed == 0:
            raise NotFoundError("None of the provided URLs were found.")

        self._store.save_catalog(kept)

        logger.info(f"Catalog delete: {removed} removed, {len(kept)} remaining")
        return DeleteResult(removed=removed, remaining=len(kept))
