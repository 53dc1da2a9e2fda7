"""Catalog Service - Facade over the link catalog engine for the API."""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from fastapi import Depends

from imagelinks_api.core.store import get_key_value_store
from imagelinks_catalog.interfaces import KeyValueStoreInterface, ProberInterface
from imagelinks_catalog.models import LinkRecord
from imagelinks_catalog.mutations import AppendResult, DeleteResult, MutationEngine, ReplaceResult
from imagelinks_catalog.queries import tag_counts
from imagelinks_catalog.selection import CatalogSelector
from imagelinks_catalog.store import CatalogStore
from imagelinks_catalog.sweep import HttpProber, LivenessSweep, SweepResult
from imagelinks_core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class CatalogService:
    """Every call re-reads the catalog; nothing is cached between requests."""

    def __init__(self, store: CatalogStore, settings: Settings):
        self._store = store
        self._settings = settings
        self._selector = CatalogSelector(store)
        self._mutations = MutationEngine(store)

    # Selection
    def random_for_redirect(self, tag: Optional[str], ratio: Optional[str]) -> LinkRecord:
        return self._selector.pick_for_redirect(tag=tag, ratio=ratio)

    def random_info(self, tag: Optional[str], ratio: Optional[str]) -> LinkRecord:
        return self._selector.pick(tag=tag, ratio=ratio)

    # Mutations
    def replace(self, payload: Any) -> ReplaceResult:
        return self._mutations.replace_all(payload)

    def append(self, payload: Any) -> AppendResult:
        return self._mutations.append_unique(payload)

    def delete(self, urls: Any) -> DeleteResult:
        return self._mutations.batch_delete(urls)

    # Queries
    def list_links(self) -> Tuple[List[LinkRecord], int]:
        return self._store.load_catalog(), self._store.load_hit_counter()

    def total_hits(self) -> int:
        return self._store.load_hit_counter()

    def tags(self) -> List[Tuple[str, int]]:
        return tag_counts(self._store.load_catalog())

    def export(self) -> str:
        return self._store.export_document()

    # Maintenance
    async def run_maintenance(self, prober: ProberInterface) -> SweepResult:
        sweep = LivenessSweep(
            self._store,
            prober,
            max_concurrency=self._settings.sweep_max_concurrency,
            probe_timeout=self._settings.probe_timeout,
        )
        return await sweep.run()


def get_catalog_service(
    kv: KeyValueStoreInterface = Depends(get_key_value_store),
    settings: Settings = Depends(get_settings),
) -> CatalogService:
    return CatalogService(CatalogStore(kv), settings)


def get_prober(settings: Settings = Depends(get_settings)) -> Iterator[ProberInterface]:
    prober = HttpProber(
        timeout=settings.probe_timeout,
        pool_size=settings.sweep_max_concurrency,
    )
    try:
        yield prober
    finally:
        prober.close()
