"""Record Model - Link records and input normalization."""

import logging
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, computed_field, field_validator

from imagelinks_core.constants import DEFAULT_TAG, VALID_URL_SCHEMES

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_tag(tag: Optional[str]) -> str:
    """Lowercase the tag and join whitespace runs with underscores."""
    if tag is None:
        return DEFAULT_TAG
    cleaned = _WHITESPACE_RUN.sub("_", tag.strip().lower())
    return cleaned or DEFAULT_TAG


def is_valid_url(url: Any) -> bool:
    return isinstance(url, str) and url.strip().startswith(VALID_URL_SCHEMES)


def compute_ratio(width: int, height: int) -> float:
    if width > 0 and height > 0:
        return width / height
    return 0.0


class LinkRecord(BaseModel):
    """One catalog entry. The URL is the natural key."""

    url: str = Field(..., description="Absolute http(s) image URL")
    tag: str = Field(default=DEFAULT_TAG, description="Category tag")
    width: int = Field(default=0, ge=0, description="Pixel width, 0 if unknown")
    height: int = Field(default=0, ge=0, description="Pixel height, 0 if unknown")

    # Client-supplied ratio and unknown keys are dropped
    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped.startswith(VALID_URL_SCHEMES):
            raise ValueError("URL must start with http:// or https://")
        return stripped

    @field_validator("tag", mode="before")
    @classmethod
    def validate_tag(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return normalize_tag(v)
        return v

    @field_validator("width", "height", mode="before")
    @classmethod
    def default_dimension(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Dimension must be a number, not a boolean")
        return 0 if v is None else v

    @computed_field
    @property
    def ratio(self) -> float:
        return compute_ratio(self.width, self.height)

    @property
    def has_dimensions(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def dimensions_label(self) -> str:
        return f"{self.width}x{self.height}" if self.has_dimensions else "unknown"

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_stored(cls, obj: Mapping) -> "LinkRecord":
        """Rebuild a persisted record; the ratio is recomputed."""
        return cls.model_validate(dict(obj))


def normalize_record(raw: Any) -> Optional[LinkRecord]:
    """Validate one raw input record, returning None when it must be dropped."""
    if not isinstance(raw, Mapping):
        return None
    if not is_valid_url(raw.get("url")):
        return None

    try:
        return LinkRecord.model_validate(dict(raw))
    except ValidationError as e:
        logger.debug(f"Dropping record {raw.get('url')!r}: {e.error_count()} validation error(s)")
        return None
