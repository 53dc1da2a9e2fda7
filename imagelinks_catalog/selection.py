"""Selection Engine - Tag/ratio filtering with fallback and a uniform random pick."""

import logging
import math
import random
from typing import List, Optional, Sequence

from imagelinks_catalog.exceptions import EmptyCatalogError, StorageUnavailableError
from imagelinks_catalog.models import LinkRecord
from imagelinks_catalog.store import CatalogStore
from imagelinks_core.constants import RATIO_TOLERANCE

logger = logging.getLogger(__name__)


def parse_ratio(text: Optional[str]) -> Optional[float]:
    """Parse "W:H" into W/H; any other shape means no ratio filter."""
    if not text:
        return None

    parts = text.split(":")
    if len(parts) != 2:
        return None

    try:
        width, height = float(parts[0]), float(parts[1])
    except ValueError:
        return None

    if height == 0 or not (math.isfinite(width) and math.isfinite(height)):
        return None

    ratio = width / height
    return ratio if ratio > 0 else None


def filter_by_tag(records: Sequence[LinkRecord], tag: str) -> List[LinkRecord]:
    return [record for record in records if record.tag == tag]


def filter_by_ratio(
    records: Sequence[LinkRecord],
    ratio: float,
    tolerance: float = RATIO_TOLERANCE,
) -> List[LinkRecord]:
    return [
        record
        for record in records
        if record.has_dimensions and abs(record.ratio - ratio) <= tolerance
    ]


def select_record(
    records: Sequence[LinkRecord],
    tag: Optional[str] = None,
    ratio: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> LinkRecord:
    """
    Pick one record at random after applying the optional filters.

    The tag filter may empty the candidate set; the ratio filter is
    discarded when it would. An empty candidate set falls back to the
    whole catalog, so only an empty catalog raises EmptyCatalogError.
    """
    if not records:
        raise EmptyCatalogError()

    candidates: List[LinkRecord] = list(records)

    if tag:
        candidates = filter_by_tag(candidates, tag)

    wanted_ratio = parse_ratio(ratio)
    if wanted_ratio is not None:
        ratio_matches = filter_by_ratio(candidates, wanted_ratio)
        if ratio_matches:
            candidates = ratio_matches
        else:
            logger.debug(f"No record within tolerance of ratio {ratio!r}, ignoring ratio filter")

    if not candidates:
        logger.debug(f"No record tagged {tag!r}, falling back to the full catalog")
        candidates = list(records)

    return (rng or random).choice(candidates)


class CatalogSelector:
    """Loads the catalog and serves random selections."""

    def __init__(self, store: CatalogStore, rng: Optional[random.Random] = None):
        self._store = store
        self._rng = rng

    def pick(self, tag: Optional[str] = None, ratio: Optional[str] = None) -> LinkRecord:
        return select_record(self._store.load_catalog(), tag=tag, ratio=ratio, rng=self._rng)

    def pick_for_redirect(self, tag: Optional[str] = None, ratio: Optional[str] = None) -> LinkRecord:
        """Pick a record and count the hit; a counter failure never blocks the redirect."""
        record = self.pick(tag=tag, ratio=ratio)
        try:
            self._store.increment_hit_counter()
        except StorageUnavailableError as e:
            logger.warning(f"Hit counter not updated: {e}")
        return record
