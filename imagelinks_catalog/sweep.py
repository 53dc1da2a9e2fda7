"""Liveness Sweep - Concurrent reachability probes that prune dead links."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import requests
from requests.adapters import HTTPAdapter

from imagelinks_catalog.interfaces import ProberInterface
from imagelinks_catalog.models import LinkRecord
from imagelinks_catalog.store import CatalogStore
from imagelinks_core.constants import (
    DEFAULT_SWEEP_CONCURRENCY,
    MAX_SWEEP_CONCURRENCY,
    PROBE_TIMEOUT_SECONDS,
    PROBE_USER_AGENT,
)

logger = logging.getLogger(__name__)


# Prober
class HttpProber(ProberInterface):
    """
    HEAD-based reachability check; redirects are followed.

    `timeout` bounds each connect and read, not the whole request; the
    sweep enforces the overall per-probe deadline. A `pool_size` of None
    matches an unbounded sweep.
    """

    def __init__(
        self,
        timeout: float = PROBE_TIMEOUT_SECONDS,
        pool_size: Optional[int] = DEFAULT_SWEEP_CONCURRENCY,
    ):
        self._timeout = timeout
        pool_size = pool_size or MAX_SWEEP_CONCURRENCY
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": PROBE_USER_AGENT})
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def is_reachable(self, url: str) -> bool:
        try:
            response = self._session.head(url, allow_redirects=True, timeout=self._timeout)
        except requests.Timeout:
            logger.debug(f"Probe timed out: {url}")
            return False
        except requests.RequestException as e:
            logger.debug(f"Probe failed for {url}: {type(e).__name__}")
            return False

        response.close()
        return 200 <= response.status_code < 400

    def close(self) -> None:
        self._session.close()
        logger.debug("HttpProber session closed")

    def __enter__(self) -> "HttpProber":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


# Result
@dataclass(frozen=True)
class SweepResult:
    checked: int
    removed: int
    remaining: int

    @property
    def message(self) -> str:
        return f"Maintenance finished. Total links removed: {self.removed}. Remaining: {self.remaining}."


# Sweep
class LivenessSweep:
    """
    Probes every catalog URL concurrently and keeps only the reachable ones.

    At most `max_concurrency` probes are in flight; None lets every
    record probe at once. Each probe gets `probe_timeout` seconds from the
    moment it starts, and one that overruns counts as unreachable without
    holding up the rest. Every probe is settled before the surviving subset
    is computed, and a failing probe only drops its own record.
    """

    def __init__(
        self,
        store: CatalogStore,
        prober: ProberInterface,
        max_concurrency: Optional[int] = DEFAULT_SWEEP_CONCURRENCY,
        probe_timeout: float = PROBE_TIMEOUT_SECONDS,
    ):
        self._store = store
        self._prober = prober
        self._max_concurrency = max_concurrency
        self._probe_timeout = probe_timeout

    async def sweep(self, records: Sequence[LinkRecord]) -> Tuple[List[LinkRecord], int]:
        """Return the reachable records in their original order and the removed count."""
        if not records:
            return [], 0

        limit = asyncio.Semaphore(self._max_concurrency or len(records))

        # An overrun probe keeps its thread until the request gives up, so
        # the pool has room for every record and is never joined
        pool = ThreadPoolExecutor(max_workers=len(records), thread_name_prefix="probe")
        try:
            outcomes = await asyncio.gather(
                *(self._probe_with_deadline(pool, limit, record.url) for record in records)
            )
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        survivors = [record for record, alive in zip(records, outcomes) if alive]
        return survivors, len(records) - len(survivors)

    async def run(self) -> SweepResult:
        """Sweep the stored catalog and save the surviving subset."""
        catalog = await asyncio.to_thread(self._store.load_catalog)
        logger.info(f"Sweep started: probing {len(catalog)} links")

        survivors, removed = await self.sweep(catalog)
        await asyncio.to_thread(self._store.save_catalog, survivors)

        logger.info(f"Sweep finished: {removed} removed, {len(survivors)} remaining")
        return SweepResult(checked=len(catalog), removed=removed, remaining=len(survivors))

    async def _probe_with_deadline(
        self,
        pool: ThreadPoolExecutor,
        limit: asyncio.Semaphore,
        url: str,
    ) -> bool:
        loop = asyncio.get_running_loop()
        async with limit:
            try:
                return await asyncio.wait_for(
                    loop.run_in_executor(pool, self._probe, url),
                    timeout=self._probe_timeout,
                )
            except asyncio.TimeoutError:
                logger.debug(f"Probe exceeded {self._probe_timeout}s deadline: {url}")
                return False

    def _probe(self, url: str) -> bool:
        try:
            return bool(self._prober.is_reachable(url))
        except Exception as e:
            logger.warning(f"Probe error for {url}, treating as unreachable: {e}")
            return False
