# Imports
from imagelinks_catalog.models import LinkRecord, normalize_record, normalize_tag
from imagelinks_catalog.kv import InMemoryKeyValueStore, JsonFileKeyValueStore
from imagelinks_catalog.store import CatalogStore
from imagelinks_catalog.mutations import (
    MutationEngine,
    ReplaceResult,
    AppendResult,
    DeleteResult,
)
from imagelinks_catalog.selection import CatalogSelector, parse_ratio, select_record
from imagelinks_catalog.sweep import HttpProber, LivenessSweep, SweepResult
from imagelinks_catalog.queries import tag_counts, describe
from imagelinks_catalog.exceptions import (
    CatalogError,
    InvalidFormatError,
    UnauthorizedError,
    NotFoundError,
    EmptyCatalogError,
    StorageUnavailableError,
    CatalogCorruptedError,
)
from imagelinks_catalog.interfaces import KeyValueStoreInterface, ProberInterface


# Exports
__all__ = [
    "LinkRecord",
    "normalize_record",
    "normalize_tag",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "CatalogStore",
    "MutationEngine",
    "ReplaceResult",
    "AppendResult",
    "DeleteResult",
    "CatalogSelector",
    "parse_ratio",
    "select_record",
    "HttpProber",
    "LivenessSweep",
    "SweepResult",
    "tag_counts",
    "describe",
    "CatalogError",
    "InvalidFormatError",
    "UnauthorizedError",
    "NotFoundError",
    "EmptyCatalogError",
    "StorageUnavailableError",
    "CatalogCorruptedError",
    "KeyValueStoreInterface",
    "ProberInterface",
]
