"""
imagelinks Core Module
======================
Shared configuration and constants across all imagelinks modules.
"""

from imagelinks_core.config import (
    AdminConfig,
    Settings,
    StoreConfig,
    SweepConfig,
    get_settings,
)
from imagelinks_core.constants import (
    DEFAULT_TAG,
    KEY_API_HITS,
    KEY_IMAGE_LIST,
    PROBE_TIMEOUT_SECONDS,
    RATIO_TOLERANCE,
)

__all__ = [
    "AdminConfig",
    "Settings",
    "StoreConfig",
    "SweepConfig",
    "get_settings",
    "DEFAULT_TAG",
    "KEY_API_HITS",
    "KEY_IMAGE_LIST",
    "PROBE_TIMEOUT_SECONDS",
    "RATIO_TOLERANCE",
]
