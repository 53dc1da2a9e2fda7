"""Catalog Queries - Read-only views derived from a full catalog scan."""

from collections import Counter
from typing import Any, Dict, List, Sequence, Tuple

from imagelinks_catalog.models import LinkRecord


def tag_counts(records: Sequence[LinkRecord]) -> List[Tuple[str, int]]:
    """Tags with their record counts, most common first."""
    # Counter keeps first-seen order, and sorted() is stable for ties
    counts = Counter(record.tag for record in records)
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def describe(record: LinkRecord) -> Dict[str, Any]:
    return {
        "url": record.url,
        "tag": record.tag,
        "width": record.width,
        "height": record.height,
        "aspectRatio": f"{record.ratio:.2f}",
    }
